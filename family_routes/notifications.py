"""
Notification routes for the logged-in user.
"""

from flask import Blueprint, request, jsonify
from flask_login import login_required

from services.notifications import get_notifications, unread_count, mark_as_read, mark_all_as_read
from .utils import current_context

bp = Blueprint('notifications', __name__)


@bp.route('/notifications')
@login_required
def notifications_list():
    ctx = current_context()
    unread_only = request.args.get('unread') in ('1', 'true')
    notifications = get_notifications(ctx, unread_only=unread_only, limit=request.args.get('limit', 50, type=int))
    return jsonify({
        'success': True,
        'unread_count': unread_count(ctx),
        'notifications': [
            {
                'id': n.id,
                'type': n.type,
                'message': n.message,
                'actor_name': n.actor_name,
                'assignment_id': n.assignment_id,
                'timestamp': n.timestamp.isoformat(),
                'is_read': n.is_read,
            }
            for n in notifications
        ],
    })


@bp.route('/notifications/<int:notification_id>/read', methods=['POST'])
@login_required
def notification_read(notification_id):
    return jsonify(mark_as_read(current_context(), notification_id))


@bp.route('/notifications/read-all', methods=['POST'])
@login_required
def notifications_read_all():
    return jsonify(mark_all_as_read(current_context()))
