"""FastAPI 接口"""
