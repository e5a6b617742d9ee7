"""
Report routes: progress and attendance, each as JSON or a CSV download.
"""

from datetime import datetime

from flask import Blueprint, Response, request, jsonify
from flask_login import login_required

from decorators import parent_required
from services.attendance import list_attendance_logs
from services.reports import (
    build_progress_report, progress_report_csv, build_attendance_report, attendance_report_csv
)
from .utils import current_context

bp = Blueprint('reports', __name__)


def csv_download(content, prefix):
    return Response(
        content,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={prefix}_{datetime.now().strftime("%Y%m%d_%H%M%S")}.csv'}
    )


@bp.route('/reports/progress')
@login_required
def progress_report():
    report = build_progress_report(
        current_context(),
        date_from=request.args.get('from'),
        date_to=request.args.get('to')
    )
    return jsonify({'success': True, 'report': report})


@bp.route('/reports/progress.csv')
@login_required
def progress_report_download():
    report = build_progress_report(
        current_context(),
        date_from=request.args.get('from'),
        date_to=request.args.get('to')
    )
    return csv_download(progress_report_csv(report), 'progress')


@bp.route('/reports/attendance')
@login_required
@parent_required
def attendance_report():
    report = build_attendance_report(
        current_context(),
        date_from=request.args.get('from'),
        date_to=request.args.get('to')
    )
    return jsonify({'success': True, 'report': report})


@bp.route('/reports/attendance.csv')
@login_required
@parent_required
def attendance_report_download():
    logs = list_attendance_logs(
        current_context(),
        date_from=request.args.get('from'),
        date_to=request.args.get('to')
    )
    return csv_download(attendance_report_csv(logs), 'attendance')
