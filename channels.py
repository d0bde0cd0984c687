"""频道 CRUD：频道名唯一（应用层预检 + 唯一索引兜底）。"""

from sqlalchemy.exc import IntegrityError

from errors import AlreadyExists, NotFound, as_result
from models import db, Channel, utcnow
from schemas import ChannelForm, parse_payload

CHANNEL_NOT_FOUND = '频道不存在'


def channel_name_exists(name: str, exclude_id: str | None = None) -> bool:
    """频道名查重，支持排除当前频道（更新时使用）。"""
    query = Channel.query.filter_by(name=name)
    if exclude_id:
        query = query.filter(Channel.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def _commit_unique(message):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise AlreadyExists(message)


@as_result
def list_channels():
    channels = Channel.query.order_by(Channel.created_at.desc()).all()
    return {'success': True, 'channels': [c.to_dict() for c in channels]}


@as_result
def get_channel(channel_id):
    channel = db.session.get(Channel, channel_id)
    if not channel:
        raise NotFound(CHANNEL_NOT_FOUND)
    return {'success': True, 'channel': channel.to_dict()}


@as_result
def create_channel(data):
    form = parse_payload(ChannelForm, data)
    if channel_name_exists(form.name):
        raise AlreadyExists('频道名已存在')

    now = utcnow()
    channel = Channel(
        name=form.name,
        name_cn=form.name_cn,
        youtube_url=form.youtube_url,
        prompt=form.prompt,
        created_at=now,
        updated_at=now,
    )
    db.session.add(channel)
    _commit_unique('频道名已存在')
    return {'success': True, 'message': '创建成功', 'id': channel.id}


@as_result
def update_channel(channel_id, data):
    form = parse_payload(ChannelForm, data)
    if channel_name_exists(form.name, exclude_id=channel_id):
        raise AlreadyExists('频道名已被使用')

    channel = db.session.get(Channel, channel_id)
    if not channel:
        raise NotFound(CHANNEL_NOT_FOUND)
    channel.name = form.name
    channel.name_cn = form.name_cn
    channel.youtube_url = form.youtube_url
    channel.prompt = form.prompt
    channel.updated_at = utcnow()
    _commit_unique('频道名已被使用')
    return {'success': True, 'message': '更新成功'}


@as_result
def delete_channel(channel_id):
    # 不级联删除视频：引用该频道的视频会保留悬空的 channel_id
    deleted = Channel.query.filter_by(id=channel_id).delete()
    db.session.commit()
    if not deleted:
        raise NotFound(CHANNEL_NOT_FOUND)
    return {'success': True, 'message': '删除成功'}
