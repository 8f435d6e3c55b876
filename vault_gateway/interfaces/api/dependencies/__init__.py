"""FastAPI 依赖注入函数"""
