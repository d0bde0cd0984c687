"""Podcast 生成服务网关：把内容/视频生成请求转发给外部 webhook，原样回传结果。

不做重试、退避或幂等处理；超时只在配置了 PODCAST_API_TIMEOUT 时生效。
"""

import json
import logging

import requests

from errors import ConfigurationMissing, UpstreamFailure

logger = logging.getLogger(__name__)

CONTENT_CREATE_PATH = "/webhook/podcast/content/create"
VIDEO_CREATE_PATH = "/webhook/podcast/video/create"
VIDEO_UPLOAD_PATH = "/webhook/podcast/video/upload"

HEADERS = {"Content-Type": "application/json"}
LOG_BODY_LIMIT = 500


class PodcastClient:
    """外部生成服务的薄封装，每个方法对应一个 webhook。"""

    def __init__(self, base_url, timeout=None, session=None):
        if not base_url:
            raise ConfigurationMissing("PODCAST_API_BASE_URL")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config, session=None):
        """从 Flask config 构造；base URL 缺失在调用时才报错。"""
        return cls(
            config.get("PODCAST_API_BASE_URL"),
            timeout=config.get("PODCAST_API_TIMEOUT"),
            session=session,
        )

    def _post(self, path, payload):
        url = f"{self.base_url}{path}"
        logger.info("Calling podcast API: %s", url)
        try:
            resp = self.session.post(url, json=payload, headers=HEADERS, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Podcast API unreachable: %s", exc)
            raise UpstreamFailure(None, str(exc)) from exc

        if not resp.ok:
            body = resp.text
            logger.error("Podcast API error %s: %s", resp.status_code, body[:LOG_BODY_LIMIT])
            raise UpstreamFailure(resp.status_code, body)

        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamFailure(resp.status_code, "响应不是合法的 JSON") from exc

    def create_content(self, user_prompt, system_prompt):
        """生成口播稿；上游返回 {output: [{text, speaker}]}，这里转成格式化的 JSON 字符串。"""
        data = self._post(CONTENT_CREATE_PATH, {"userPrompt": user_prompt, "systemPrompt": system_prompt})
        output = data.get("output", []) if isinstance(data, dict) else []
        return {"content": json.dumps(output, ensure_ascii=False, indent=2)}

    def create_video(self, title, content):
        return self._post(VIDEO_CREATE_PATH, {"title": title, "content": content})

    def upload_video(self, record):
        """上传完整视频记录，返回 {code, message}。"""
        data = self._post(VIDEO_UPLOAD_PATH, record)
        if not isinstance(data, dict):
            data = {}
        return {"code": data.get("code"), "message": data.get("message")}
