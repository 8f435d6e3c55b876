"""接口层服务"""
