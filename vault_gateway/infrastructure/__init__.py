"""基础设施层：凭证加载、认证、后端适配器、日志"""
