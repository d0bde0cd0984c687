"""生成相关的服务函数：组合视频/频道记录与 Podcast 网关调用。"""

from errors import ValidationFailure, as_result
from models import db, Channel
from schemas import ContentRequest, parse_payload
from videos import find_video


@as_result
def generate_content(data, client):
    """生成视频口播稿；未显式给 systemPrompt 时使用所选频道的 prompt。"""
    form = parse_payload(ContentRequest, data)
    system_prompt = form.system_prompt
    if system_prompt is None:
        system_prompt = ''
        if form.channel_id:
            channel = db.session.get(Channel, form.channel_id)
            if not channel:
                raise ValidationFailure('所选频道不存在')
            system_prompt = channel.prompt or ''
    result = client.create_content(form.user_prompt, system_prompt)
    return {'success': True, 'content': result['content']}


@as_result
def start_video_generation(video_id, client):
    video = find_video(video_id)
    if not video.content:
        raise ValidationFailure('该视频还没有内容，请先生成内容')
    result = client.create_video(video.title, video.content)
    return {'success': True, 'message': '视频生成任务已提交', 'result': result}


@as_result
def upload_video(video_id, client):
    video = find_video(video_id)
    channel = db.session.get(Channel, video.channel_id)
    result = client.upload_video(video.to_dict(channel))
    return {'success': True, 'message': result.get('message') or '上传任务已提交', 'code': result.get('code')}
