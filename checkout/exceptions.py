"""
统一异常体系。

所有业务异常继承 BaseAppException，包含：
- type:        错误类型标识（validation_error / decode_error / auth_error / ...）
- code:        业务错误码（MISSING_FIELDS / INVALID_SIGNATURE / PAYMENT_DECLINED / ...）
- message:     人类可读的描述
- detail:      可选的附加信息（dict / list / None）
- http_status: HTTP 状态码

View 层只需 raise，exception_handler 统一捕获并格式化响应。
CollaboratorFailure 例外：它只在 services 内部被捕获并记日志，永远不会到达客户端。
"""


class BaseAppException(Exception):
    """所有业务异常的基类。"""

    type = 'error'
    code = 'UNKNOWN_ERROR'
    http_status = 500

    def __init__(self, message, code=None, detail=None, http_status=None):
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.detail = detail
        super().__init__(message)


class ValidationError(BaseAppException):
    """输入缺失或格式错误。intake / view 层抛出，400。"""

    type = 'validation_error'
    code = 'VALIDATION_ERROR'
    http_status = 400


class DecodeError(BaseAppException):
    """returnData（base64 JSON 订单）无法解码或缺少必填的商业字段，400。"""

    type = 'decode_error'
    code = 'INVALID_ORDER_DATA'
    http_status = 400


class PaymentDeclined(BaseAppException):
    """网关明确拒绝了这笔付款。confirm 路径抛出，400。"""

    type = 'declined'
    code = 'PAYMENT_DECLINED'
    http_status = 400


class AuthError(BaseAppException):
    """
    Webhook 签名校验失败，401。

    配置了 secret 时这是系统里唯一 fail-closed 的路径。
    """

    type = 'auth_error'
    code = 'INVALID_SIGNATURE'
    http_status = 401


class BlockError(BaseAppException):
    """业务规则阻止操作（例如订单已是终态还要再转换），409。"""

    type = 'block'
    code = 'BUSINESS_BLOCK'
    http_status = 409


class GatewayError(BaseAppException):
    """
    支付网关登录或创建支付链接失败，502。

    本地不重试：用户可以重新提交表单。
    """

    type = 'gateway_error'
    code = 'GATEWAY_ERROR'
    http_status = 502


class CollaboratorFailure(BaseAppException):
    """邮件 / CRM 调用失败。只记日志，不回滚订单状态，也不返回给客户端。"""

    type = 'collaborator_error'
    code = 'COLLABORATOR_FAILURE'
    http_status = 502
