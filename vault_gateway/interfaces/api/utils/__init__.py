"""接口层工具函数"""
