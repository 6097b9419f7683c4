"""pkgstore - 目录式包存储与还原配置合并"""

__version__ = "0.3.0"
