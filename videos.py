"""视频 CRUD：写入前校验所属频道存在，列表批量关联频道名。"""

from errors import NotFound, ValidationFailure, as_result
from models import db, Channel, Video, VideoStatus, utcnow
from schemas import VideoForm, parse_payload

VIDEO_NOT_FOUND = '视频不存在'


def _channel_map(channel_ids):
    """一次查询取回所有关联频道，避免逐行查库。"""
    ids = {cid for cid in channel_ids if cid}
    if not ids:
        return {}
    return {c.id: c for c in Channel.query.filter(Channel.id.in_(ids)).all()}


def _require_channel(channel_id):
    if not db.session.get(Channel, channel_id):
        raise ValidationFailure('所选频道不存在')


def _apply_form(video, form):
    video.channel_id = form.channel_id
    video.title = form.title
    video.status = form.status
    video.prompt = form.prompt
    video.content = form.content
    video.description = form.description
    video.tags = list(form.tags)
    video.audio_url = form.audio_url
    video.subtitle_url = form.subtitle_url
    video.video_url = form.video_url


@as_result
def list_videos(channel_id=None):
    query = Video.query
    if channel_id:
        query = query.filter_by(channel_id=channel_id)
    videos = query.order_by(Video.created_at.desc()).all()
    channels = _channel_map(v.channel_id for v in videos)
    return {'success': True, 'videos': [v.to_dict(channels.get(v.channel_id)) for v in videos]}


def find_video(video_id):
    video = db.session.get(Video, video_id)
    if not video:
        raise NotFound(VIDEO_NOT_FOUND)
    return video


@as_result
def get_video(video_id):
    video = find_video(video_id)
    channel = db.session.get(Channel, video.channel_id)
    return {'success': True, 'video': video.to_dict(channel)}


@as_result
def create_video(data):
    form = parse_payload(VideoForm, data)
    _require_channel(form.channel_id)

    now = utcnow()
    video = Video(created_at=now, updated_at=now)
    _apply_form(video, form)
    db.session.add(video)
    db.session.commit()
    return {'success': True, 'message': '创建成功', 'id': video.id}


@as_result
def update_video(video_id, data):
    form = parse_payload(VideoForm, data)
    _require_channel(form.channel_id)

    video = find_video(video_id)
    if not VideoStatus.can_transition(video.status, form.status):
        raise ValidationFailure(f'不允许从 {video.status} 变更为 {form.status}')
    _apply_form(video, form)
    video.updated_at = utcnow()
    db.session.commit()
    return {'success': True, 'message': '更新成功'}


@as_result
def delete_video(video_id):
    deleted = Video.query.filter_by(id=video_id).delete()
    db.session.commit()
    if not deleted:
        raise NotFound(VIDEO_NOT_FOUND)
    return {'success': True, 'message': '删除成功'}
