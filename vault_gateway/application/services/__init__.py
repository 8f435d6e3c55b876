"""应用服务"""
