"""纯领域服务：批量调度与请求校验"""
