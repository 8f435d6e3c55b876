"""领域层：异常、值对象、端口与纯领域服务"""
