class InvalidInputError(ValueError):
    """输入不合法：点集为空、输入文件格式错误或退火调度选择无效。"""
