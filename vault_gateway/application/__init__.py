"""应用层：客户端缓存、操作用例与网关门面"""
