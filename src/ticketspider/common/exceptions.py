"""自定义异常类

页面交互层的失败（元素未找到、等待超时、价格未命中）一律以 None/False
返回，不在此处定义。这里只保留会跨越模块边界抛出的错误。
"""

from __future__ import annotations


class TicketSpiderError(Exception):
    """TicketSpider 基础异常类

    所有自定义异常的基类。
    """
    pass


class BrowserError(TicketSpiderError):
    """浏览器相关错误的基类"""
    pass


class PageLoadError(BrowserError):
    """页面加载失败

    地图首页无法在超时时间内打开时抛出，整个运行随之终止。
    """
    def __init__(self, url: str, message: str = "页面加载失败"):
        super().__init__(f"{message}: {url}")
        self.url = url


class ValidationError(TicketSpiderError):
    """验证失败错误"""
    pass


class ConfigError(TicketSpiderError):
    """配置相关错误"""
    pass


class ExportError(TicketSpiderError):
    """结果文件写入失败"""
    def __init__(self, path: str, reason: str = "写入失败"):
        super().__init__(f"导出 {path} 失败: {reason}")
        self.path = path
        self.reason = reason


class NotificationError(TicketSpiderError):
    """通知发送失败"""
    pass
