"""Flask 入口：认证接口、频道/视频 CRUD 接口与生成服务代理接口。"""

import logging

from flask import Flask, jsonify, request
from flask_login import LoginManager, login_required
from werkzeug.exceptions import HTTPException

import channels
import generation
import videos
from auth import (
    authenticate,
    clear_auth_cookie,
    get_current_user,
    load_identity_from_request,
    read_auth_cookie,
    register_user,
    set_auth_cookie,
)
from config import Config
from errors import ConfigurationMissing, status_for
from gateway.podcast_api import PodcastClient
from models import db, init_schema

app = Flask(__name__)
app.config.from_object(Config)
app.json.ensure_ascii = False
logging.basicConfig(level=app.config['LOG_LEVEL'])
app.logger.setLevel(app.config['LOG_LEVEL'])

# 没有签名密钥就无法签发/校验 token，直接拒绝启动
if not app.config.get('SECRET_KEY'):
    raise ConfigurationMissing('SECRET_KEY')

db.init_app(app)

login_manager = LoginManager()
login_manager.init_app(app)
login_manager.request_loader(load_identity_from_request)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'success': False, 'message': '请先登录'}), 401


@app.before_request
def ensure_schema():
    init_schema(app)


@app.errorhandler(Exception)
def handle_unexpected(exc):
    if isinstance(exc, HTTPException):
        return jsonify({'success': False, 'message': exc.description}), exc.code
    app.logger.error("Unhandled exception on %s: %s", request.path, exc, exc_info=True)
    return jsonify({'success': False, 'message': '服务器内部错误'}), 500


def payload():
    return request.get_json(silent=True) or {}


def respond(result):
    return jsonify(result), status_for(result)


def get_podcast_client():
    return PodcastClient.from_config(app.config)


@app.route('/health')
def health_check():
    return jsonify({'status': 'ok'})


# --- 认证接口 ---

@app.route('/api/auth/register', methods=['POST'])
def register():
    result = register_user(payload())
    response, status = respond(result)
    if result.get('success'):
        set_auth_cookie(response, result['token'])
    return response, status


@app.route('/api/auth/login', methods=['POST'])
def login():
    result = authenticate(payload())
    response, status = respond(result)
    if result.get('success'):
        set_auth_cookie(response, result['token'])
    return response, status


@app.route('/api/auth/me')
def whoami():
    token = read_auth_cookie()
    if not token:
        return jsonify({'success': False, 'user': None})
    return jsonify(get_current_user(token))


@app.route('/api/auth/logout', methods=['POST'])
def logout():
    return clear_auth_cookie(jsonify({'success': True}))


# --- 频道 ---

@app.route('/api/channels', methods=['GET'])
@login_required
def list_channels():
    return respond(channels.list_channels())


@app.route('/api/channels', methods=['POST'])
@login_required
def create_channel():
    return respond(channels.create_channel(payload()))


@app.route('/api/channels/<channel_id>', methods=['GET'])
@login_required
def get_channel(channel_id):
    return respond(channels.get_channel(channel_id))


@app.route('/api/channels/<channel_id>', methods=['PUT'])
@login_required
def update_channel(channel_id):
    return respond(channels.update_channel(channel_id, payload()))


@app.route('/api/channels/<channel_id>', methods=['DELETE'])
@login_required
def delete_channel(channel_id):
    return respond(channels.delete_channel(channel_id))


# --- 视频 ---

@app.route('/api/videos', methods=['GET'])
@login_required
def list_videos():
    return respond(videos.list_videos(request.args.get('channelId')))


@app.route('/api/videos', methods=['POST'])
@login_required
def create_video():
    return respond(videos.create_video(payload()))


@app.route('/api/videos/<video_id>', methods=['GET'])
@login_required
def get_video(video_id):
    return respond(videos.get_video(video_id))


@app.route('/api/videos/<video_id>', methods=['PUT'])
@login_required
def update_video(video_id):
    return respond(videos.update_video(video_id, payload()))


@app.route('/api/videos/<video_id>', methods=['DELETE'])
@login_required
def delete_video(video_id):
    return respond(videos.delete_video(video_id))


# --- 生成服务代理 ---

@app.route('/api/generation/content', methods=['POST'])
@login_required
def generate_content():
    return respond(generation.generate_content(payload(), get_podcast_client()))


@app.route('/api/videos/<video_id>/generate', methods=['POST'])
@login_required
def generate_video(video_id):
    return respond(generation.start_video_generation(video_id, get_podcast_client()))


@app.route('/api/videos/<video_id>/upload', methods=['POST'])
@login_required
def upload_video(video_id):
    return respond(generation.upload_video(video_id, get_podcast_client()))


if __name__ == '__main__':
    app.run(debug=True, port=5000)
