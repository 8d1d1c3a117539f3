"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在会话循环（api.service）中统一捕获并提示用户，而不是直接退出进程。

StreamCancelled 例外：它表示用户中断（Ctrl-C），不是错误，
由 Provider 与 ConversationEngine 吞掉并转换成“优雅停止”。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "DECODE_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 model、line_size 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、超时等。"""


class DecodeError(BusinessError):
    """流式响应中某一行无法解析为 JSON 对象。"""


class BufferOverflowError(BusinessError):
    """单行响应超过缓冲上限（与 DecodeError 区分）。"""


class ApiError(BusinessError):
    """服务端返回的错误（错误行或非 2xx 状态码）。"""


class ServerError(ApiError):
    """响应行中携带了非空的 {"error": "..."} 字段。"""


class StatusError(ApiError):
    """HTTP 状态码 >= 400 且响应体中没有可解析的错误信息。"""

    def __init__(self, status_code: int, status: str = "", error_message: str = ""):
        self.status_code = status_code
        self.status = status
        self.error_message = error_message
        super().__init__(
            code="STATUS_ERROR",
            message=self._format(status, error_message),
            http_status=status_code,
        )

    @staticmethod
    def _format(status: str, error_message: str) -> str:
        if status and error_message:
            return f"{status}: {error_message}"
        if status:
            return status
        if error_message:
            return error_message
        return "something went wrong, please see the server logs for details"


class ValidationError(BusinessError):
    """参数或输入校验失败。"""


class ConfigError(ValidationError):
    """启动配置缺失、不可读或校验失败，属于致命错误。"""


class StreamCancelled(Exception):
    """用户中断了正在进行的流式调用（非错误）。"""
