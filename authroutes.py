# Core Flask imports
from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user

# Database and model imports
from models import User, db

# Werkzeug utilities
from werkzeug.security import check_password_hash, generate_password_hash

from services.context import RequestContext
from services.notifications import unread_count

auth_blueprint = Blueprint('auth', __name__)


def user_to_dict(user):
    profile = user.student_profile
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'role': user.role,
        'family_id': user.family_id,
        'student_id': profile.id if profile else None,
    }


@auth_blueprint.route('/login', methods=['POST'])
def login():
    if current_user.is_authenticated:
        return jsonify({'success': True, 'user': user_to_dict(current_user)})

    data = request.get_json(silent=True) or request.form
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''

    # Check if email and password are provided
    if not email or not password:
        return jsonify({'success': False, 'error': 'Email and password are required.', 'kind': 'validation'}), 400

    user = User.query.filter_by(email=email).first()
    if not user or not check_password_hash(user.password_hash, password):
        current_app.logger.warning(f"Failed login attempt for {email}")
        return jsonify({'success': False, 'error': 'Invalid email or password.', 'kind': 'authorization'}), 401

    login_user(user, remember=bool(data.get('remember')))
    current_app.logger.info(f"User {user.id} logged in ({user.role})")
    return jsonify({'success': True, 'user': user_to_dict(user)})


@auth_blueprint.route('/logout', methods=['POST'])
@login_required
def logout():
    current_app.logger.info(f"User {current_user.id} logged out")
    logout_user()
    return jsonify({'success': True})


@auth_blueprint.route('/me')
@login_required
def me():
    ctx = RequestContext.from_user(current_user)
    return jsonify({
        'success': True,
        'user': user_to_dict(current_user),
        'unread_notifications': unread_count(ctx),
    })


@auth_blueprint.route('/change-password', methods=['POST'])
@login_required
def change_password():
    """Handle password change via AJAX."""
    data = request.get_json(silent=True) or request.form

    current_password = (data.get('current_password') or '').strip()
    new_password = (data.get('new_password') or '').strip()

    # Validate input
    if not current_password or not new_password:
        return jsonify({'success': False, 'error': 'All fields are required.', 'kind': 'validation'}), 400

    if len(new_password) < 6:
        return jsonify({
            'success': False,
            'error': 'Password must be at least 6 characters long.',
            'kind': 'validation'
        }), 400

    # Verify current password
    if not check_password_hash(current_user.password_hash, current_password):
        return jsonify({'success': False, 'error': 'Current password is incorrect.', 'kind': 'validation'}), 400

    current_user.password_hash = generate_password_hash(new_password)
    db.session.commit()
    return jsonify({'success': True})
