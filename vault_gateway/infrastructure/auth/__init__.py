"""认证：bearer token 来源"""
