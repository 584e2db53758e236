"""
资源路径工具函数
处理包内数据文件以及PyInstaller打包后的资源文件路径
"""
import sys
import os


DATA_PREFIX = 'data:'


def resource_path(relative_path: str) -> str:
    """
    获取资源文件的绝对路径
    兼容开发环境和PyInstaller打包后的环境

    :param relative_path: 相对于包根目录的路径（如 'data/planar3r.json'）
    :return: 资源文件的绝对路径
    """
    if getattr(sys, 'frozen', False):
        # sys._MEIPASS是临时解压目录，包含所有打包的文件
        if hasattr(sys, '_MEIPASS'):
            base_path = os.path.join(sys._MEIPASS, 'analytic_ik')
        else:
            base_path = os.path.dirname(sys.executable)
    else:
        # 开发环境：utils 的父目录即包根目录
        base_path = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    return os.path.join(base_path, relative_path)


def get_data_path(filename: str) -> str:
    """
    获取data目录下文件的路径

    :param filename: 文件名（如 'planar3r.json'）
    :return: 文件的绝对路径
    """
    return resource_path(os.path.join('data', filename))


def resolve_path(path: str, base_dir: str) -> str:
    """
    解析配置文件中的路径:
    - 'data:xxx.json' 指向包内 data 目录
    - 绝对路径原样返回
    - 相对路径相对于 base_dir（通常是配置文件所在目录）
    """
    if path.startswith(DATA_PREFIX):
        return get_data_path(path[len(DATA_PREFIX):])
    if os.path.isabs(path):
        return path
    return os.path.normpath(os.path.join(base_dir, path))
