"""数据模型定义：users / channels / videos 三张表对应的 SQLAlchemy ORM 类。"""

import logging
import threading
import uuid
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func

db = SQLAlchemy()

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow():
    """naive UTC 时间，与无时区的 DateTime 列保持一致。"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    return value.isoformat() if value else None


class VideoStatus:
    """视频状态：仅作展示用途，任意状态之间都允许直接修改。"""

    DRAFT = 'draft'
    PENDING = 'pending'
    PROCESSING = 'processing'
    CREATING_AUDIO = 'creating-audio'
    CREATING_VIDEO = 'creating-video'
    READY_TO_PUBLISH = 'ready-to-publish'
    UPLOADING = 'uploading'
    COMPLETED = 'completed'
    FAILED = 'failed'

    ALL = (
        DRAFT, PENDING, PROCESSING, CREATING_AUDIO, CREATING_VIDEO,
        READY_TO_PUBLISH, UPLOADING, COMPLETED, FAILED,
    )

    # 允许的状态迁移表：目前完全放开
    TRANSITIONS = dict.fromkeys(ALL, frozenset(ALL))

    @classmethod
    def can_transition(cls, current: str, target: str) -> bool:
        return target in cls.TRANSITIONS.get(current, ())


class User(db.Model):
    """用户账户表：只存用户名与密码哈希，无更新/删除路径。"""

    __tablename__ = 'users'
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    username = db.Column(db.String(50), unique=True, index=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=func.now())


class Channel(db.Model):
    """YouTube 频道：name 唯一，prompt 作为生成内容时的 system prompt。"""

    __tablename__ = 'channels'
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(100), unique=True, index=True, nullable=False)
    name_cn = db.Column(db.String(100), nullable=False)
    youtube_url = db.Column(db.String(500), default='')
    prompt = db.Column(db.Text, default='')
    created_at = db.Column(db.DateTime, index=True)
    updated_at = db.Column(db.DateTime)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'nameCn': self.name_cn,
            'youtubeUrl': self.youtube_url or '',
            'prompt': self.prompt or '',
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


class Video(db.Model):
    """频道下的视频记录，channel_id 关联 channels.id（未建外键，删除频道不级联）。"""

    __tablename__ = 'videos'
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    channel_id = db.Column(db.String(32), index=True, nullable=False)
    title = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(32), default=VideoStatus.DRAFT, nullable=False)
    prompt = db.Column(db.Text, default='')
    content = db.Column(db.Text, default='')
    description = db.Column(db.Text, default='')
    tags = db.Column(db.JSON, default=list)
    audio_url = db.Column(db.String(500), default='')
    subtitle_url = db.Column(db.String(500), default='')
    video_url = db.Column(db.String(500), default='')
    created_at = db.Column(db.DateTime, index=True)
    updated_at = db.Column(db.DateTime)

    def to_dict(self, channel=None):
        """channel 为空时（频道已被删除）channelName 返回 None。"""
        return {
            'id': self.id,
            'channelId': self.channel_id,
            'channelName': channel.name if channel else None,
            'channelNameCn': channel.name_cn if channel else None,
            'title': self.title,
            'status': self.status,
            'prompt': self.prompt or '',
            'content': self.content or '',
            'description': self.description or '',
            'tags': list(self.tags or []),
            'audioUrl': self.audio_url or '',
            'subtitleUrl': self.subtitle_url or '',
            'videoUrl': self.video_url or '',
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


# ---- 表结构懒初始化：进程内只执行一次，并发的首批请求共用同一次初始化 ----
_schema_lock = threading.Lock()
_schema_ready = False


def init_schema(app):
    """首次使用时建表（含唯一索引）；加锁保证并发首请求不会重复初始化。"""
    global _schema_ready
    if _schema_ready:
        return
    with _schema_lock:
        if _schema_ready:
            return
        with app.app_context():
            db.create_all()
        _schema_ready = True
        logger.info("Database schema ready")
