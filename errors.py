"""错误分类：服务层抛出的业务异常，以及把异常收敛为统一结果结构的边界装饰器。"""

import logging
from functools import wraps

from sqlalchemy.exc import SQLAlchemyError

from models import db

logger = logging.getLogger(__name__)


class DashboardError(Exception):
    """所有业务异常的基类，message 会原样返回给前端。"""

    code = "error"
    status = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationFailure(DashboardError):
    code = "validation"
    status = 400


class AlreadyExists(DashboardError):
    code = "exists"
    status = 409


class NotFound(DashboardError):
    code = "not_found"
    status = 404


class InvalidCredentials(DashboardError):
    code = "invalid_credentials"
    status = 401


class UpstreamFailure(DashboardError):
    """外部生成服务返回非 2xx 或网络失败。"""

    code = "upstream"
    status = 502

    def __init__(self, status_code, body):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"生成服务请求失败: {body}"
        else:
            message = f"生成服务请求失败: {status_code} - {body}"
        super().__init__(message)


class ConfigurationMissing(DashboardError):
    """必需的环境配置缺失；属于致命错误，不会被 as_result 吞掉。"""

    code = "config"
    status = 500

    def __init__(self, setting):
        self.setting = setting
        super().__init__(f"{setting} 环境变量未设置")


# 失败结果里的 error 字段 -> HTTP 状态码，路由层用它决定响应码
ERROR_STATUS = {
    cls.code: cls.status
    for cls in (ValidationFailure, AlreadyExists, NotFound, InvalidCredentials, UpstreamFailure)
}


def failure(exc):
    return {"success": False, "message": exc.message, "error": exc.code}


def as_result(func):
    """服务函数边界：业务异常与数据库异常转换为 {success: False, message} 结果。"""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationMissing:
            raise
        except DashboardError as exc:
            return failure(exc)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Store operation failed in %s", func.__name__)
            return {"success": False, "message": "数据库操作失败", "error": "store"}

    return wrapper


def status_for(result):
    """成功结果返回 200，失败结果按 error 类型映射状态码。"""
    if result.get("success"):
        return 200
    return ERROR_STATUS.get(result.get("error"), 500)
