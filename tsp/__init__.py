"""命令行求解器：读取问题实例文件，调用 anneal 包求解并输出路径。"""
