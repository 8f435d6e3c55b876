"""凭证配置加载"""
