"""认证：密码哈希、会话 token 签发/校验、注册登录流程，以及 auth-token cookie 的读写。"""

import logging

from flask import current_app, request
from flask_login import UserMixin
from itsdangerous import BadData, URLSafeTimedSerializer
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from errors import AlreadyExists, InvalidCredentials, as_result
from models import db, User, utcnow
from schemas import Credentials, RegisterRequest, parse_payload

logger = logging.getLogger(__name__)

PASSWORD_HASH_METHOD = "pbkdf2:sha256:260000"
PASSWORD_SALT_LENGTH = 16

AUTH_COOKIE_NAME = 'auth-token'
TOKEN_MAX_AGE = 7 * 24 * 60 * 60  # 7 天
TOKEN_SALT = 'auth-token'

# 用户不存在与密码错误共用同一提示，避免被枚举用户名
INVALID_CREDENTIALS_MESSAGE = '用户名或密码错误'


class Identity(UserMixin):
    """从 token 还原出的登录身份，不查库。"""

    def __init__(self, user_id: str, username: str):
        self.id = user_id
        self.username = username

    def to_dict(self):
        return {'userId': self.id, 'username': self.username}


# --- 密码哈希 ---

def is_hashed_password(value: str) -> bool:
    """简单校验字符串是否看起来是 Werkzeug 生成的哈希（含多段 $）。"""
    return isinstance(value, str) and value.count("$") >= 2


def hash_password(password: str) -> str:
    return generate_password_hash(password, method=PASSWORD_HASH_METHOD, salt_length=PASSWORD_SALT_LENGTH)


def verify_password(stored: str, candidate: str) -> bool:
    """安全校验密码，遇到坏数据返回 False 而不是抛异常。"""
    if not stored or not candidate or not is_hashed_password(stored):
        return False
    try:
        return check_password_hash(stored, candidate)
    except ValueError:
        return False


# --- 会话 token ---

def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def issue_token(user_id: str, username: str) -> str:
    return _serializer().dumps({'userId': user_id, 'username': username})


def verify_token(token):
    """签名错误、格式错误、过期一律返回 None，调用方无法区分。"""
    if not token or not isinstance(token, str):
        return None
    try:
        payload = _serializer().loads(token, max_age=TOKEN_MAX_AGE)
    except BadData:
        return None
    if not isinstance(payload, dict) or not payload.get('userId') or not payload.get('username'):
        return None
    return Identity(payload['userId'], payload['username'])


# --- 注册 / 登录 / 当前用户 ---

def username_exists(username: str) -> bool:
    return db.session.query(User.query.filter_by(username=username).exists()).scalar()


@as_result
def register_user(data):
    form = parse_payload(RegisterRequest, data)
    if username_exists(form.username):
        raise AlreadyExists('用户名已存在')

    user = User(username=form.username, password=hash_password(form.password), created_at=utcnow())
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # 并发注册同名用户时由唯一索引兜底
        db.session.rollback()
        raise AlreadyExists('用户名已存在')

    logger.info("Registered user %s", user.username)
    return {'success': True, 'message': '注册成功', 'token': issue_token(user.id, user.username)}


@as_result
def authenticate(data):
    form = parse_payload(Credentials, data)
    user = User.query.filter_by(username=form.username).first()
    if not user or not verify_password(user.password, form.password):
        logger.info("Failed login for %s", form.username)
        raise InvalidCredentials(INVALID_CREDENTIALS_MESSAGE)
    return {'success': True, 'message': '登录成功', 'token': issue_token(user.id, user.username)}


def get_current_user(token):
    identity = verify_token(token)
    if identity is None:
        return {'success': False, 'user': None}
    return {'success': True, 'user': identity.to_dict()}


# --- cookie 传输 ---

def set_auth_cookie(response, token):
    response.set_cookie(
        AUTH_COOKIE_NAME,
        token,
        max_age=TOKEN_MAX_AGE,
        path='/',
        httponly=True,
        secure=current_app.config.get('AUTH_COOKIE_SECURE', False),
        samesite='Lax',
    )
    return response


def clear_auth_cookie(response):
    response.delete_cookie(AUTH_COOKIE_NAME, path='/')
    return response


def read_auth_cookie():
    return request.cookies.get(AUTH_COOKIE_NAME)


def load_identity_from_request(req):
    """Flask-Login request_loader：cookie 缺失或无效时视为匿名。"""
    token = req.cookies.get(AUTH_COOKIE_NAME)
    return verify_token(token)
