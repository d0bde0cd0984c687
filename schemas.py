"""请求体校验：前端传入的 JSON 统一先过 pydantic 模型，再交给服务函数。"""

from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError
from pydantic.alias_generators import to_camel

from errors import ValidationFailure
from models import VideoStatus

MIN_PASSWORD_LENGTH = 6

StatusValue = Literal[VideoStatus.ALL]

# 用户名、频道名等标识字段去掉首尾空白后再校验长度；密码保持原样
Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
RequiredId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    """字段在 Python 侧用 snake_case，JSON 侧用 camelCase。"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Credentials(CamelModel):
    username: Username
    password: str = Field(..., min_length=1)


class RegisterRequest(Credentials):
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class ChannelForm(CamelModel):
    name: Name
    name_cn: Name
    youtube_url: Annotated[str, StringConstraints(strip_whitespace=True)] = ''
    prompt: str = ''


class VideoForm(CamelModel):
    channel_id: RequiredId
    title: Title
    status: StatusValue = VideoStatus.DRAFT
    prompt: str = ''
    content: str = ''
    description: str = ''
    tags: List[str] = Field(default_factory=list)
    audio_url: str = ''
    subtitle_url: str = ''
    video_url: str = ''


class ContentRequest(CamelModel):
    user_prompt: str = Field(..., min_length=1)
    system_prompt: Optional[str] = None
    channel_id: Optional[str] = None


# 字段名 -> 前端提示语，未列出的字段回落为通用提示
FIELD_MESSAGES = {
    'username': '请填写用户名和密码',
    'password': '请填写用户名和密码',
    'name': '频道名和中文名为必填项',
    'nameCn': '频道名和中文名为必填项',
    'channelId': '请选择频道',
    'title': '请填写视频标题',
    'status': '视频状态不合法',
    'userPrompt': '请先输入视频 Prompt',
}


def parse_payload(schema, data):
    """按 schema 校验 dict，失败时抛出 ValidationFailure 并给出第一条可读提示。"""
    try:
        return schema.model_validate(data or {})
    except ValidationError as exc:
        first = exc.errors()[0]
        field = str(first['loc'][0]) if first['loc'] else ''
        if schema is RegisterRequest and field == 'password' and first['type'] == 'string_too_short':
            raise ValidationFailure(f'密码长度至少{MIN_PASSWORD_LENGTH}位') from exc
        raise ValidationFailure(FIELD_MESSAGES.get(field, f'参数错误: {field}')) from exc
