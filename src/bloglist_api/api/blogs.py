"""
Blogs Blueprint.

Routes:
- GET    /api/blogs           - All blogs, most liked first
- GET    /api/blogs/<id>      - One blog
- POST   /api/blogs           - Create (session required)
- PATCH  /api/blogs/<id>/like - Add a like (session required)
- DELETE /api/blogs/<id>      - Delete (session required, creator only)
"""
import logging

from flask import Blueprint, jsonify

from .. import errors
from ..account_auth import get_current_account, require_account_auth
from ..blog_registry import create_blog, delete_blog, get_blog, like_blog
from ..ranking import ordered_blogs
from .request_data import get_json_object

logger = logging.getLogger(__name__)

blogs_bp = Blueprint('blogs', __name__, url_prefix='/api')


@blogs_bp.route('/blogs', methods=['GET'])
def list_blogs():
    """Ranked list; visible to everyone, logged in or not."""
    return jsonify([blog.to_dict() for blog in ordered_blogs()])


@blogs_bp.route('/blogs/<int:blog_id>', methods=['GET'])
def show_blog(blog_id):
    blog = get_blog(blog_id)
    if blog is None:
        return errors.error_response(errors.NOT_FOUND, f'Blog {blog_id} not found')
    return jsonify(blog.to_dict())


@blogs_bp.route('/blogs', methods=['POST'])
@require_account_auth
def add_blog():
    """Body: {"title": ..., "author": ..., "url": ...}"""
    data = get_json_object()
    if data is None:
        return errors.error_response(errors.INVALID_INPUT, 'Request body must be a JSON object')

    result = create_blog(get_current_account(), data.get('title'), data.get('author'), data.get('url'))
    if not result.success:
        return errors.result_error_response(result)

    return jsonify(result.blog.to_dict()), 201


@blogs_bp.route('/blogs/<int:blog_id>/like', methods=['PATCH'])
@require_account_auth
def add_like(blog_id):
    result = like_blog(get_current_account(), blog_id)
    if not result.success:
        return errors.result_error_response(result)

    return jsonify(result.blog.to_dict())


@blogs_bp.route('/blogs/<int:blog_id>', methods=['DELETE'])
@require_account_auth
def remove_blog(blog_id):
    result = delete_blog(get_current_account(), blog_id)
    if not result.success:
        return errors.result_error_response(result)

    return '', 204
