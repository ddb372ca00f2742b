from flask import Blueprint, jsonify, request
from werkzeug.exceptions import NotFound
import sqlite3
import json

# Import utilities
from utils.db_utils import get_db_connection, return_db_connection, get_db_cursor
from utils.logging_utils import app_logger, db_logger, log_info, log_error, log_warning
from utils.security_utils import ValidationError, validate_id_list, validate_positive_id, validate_optional_index
from utils.rate_limiter import rate_limit

outline_api_bp = Blueprint('outline_api_bp', __name__, url_prefix='/api')

# One ordered sequence per parent row
SCOPES = {
    'modules': {'table': 'modules', 'parent_table': 'courses', 'parent_column': 'course_id', 'label': 'Course'},
    'chapters': {'table': 'chapters', 'parent_table': 'modules', 'parent_column': 'module_id', 'label': 'Module'},
    'content': {'table': 'content_items', 'parent_table': 'chapters', 'parent_column': 'chapter_id', 'label': 'Chapter'},
}

LIST_COLUMNS = {
    'modules': 'id, course_id, title, description, order_index',
    'chapters': 'id, module_id, title, description, order_index',
    'content': 'id, chapter_id, title, content_type, content_data, order_index',
}


def _ensure_parent(conn, scope_key, parent_id):
    scope = SCOPES[scope_key]
    row = conn.execute(f"SELECT id FROM {scope['parent_table']} WHERE id = ?", (parent_id,)).fetchone()
    if not row:
        raise NotFound(f"{scope['label']} not found")


def _scope_ids(conn, scope_key, parent_id):
    scope = SCOPES[scope_key]
    rows = conn.execute(
        f"SELECT id FROM {scope['table']} WHERE {scope['parent_column']} = ? ORDER BY order_index, id",
        (parent_id,)
    ).fetchall()
    return [row['id'] for row in rows]


def _write_order(cursor, scope_key, parent_id, ordered_ids):
    """Rewrite order_index as 0..n-1 following ``ordered_ids``."""
    scope = SCOPES[scope_key]
    for index, item_id in enumerate(ordered_ids):
        cursor.execute(
            f"UPDATE {scope['table']} SET order_index = ?, updated_at = CURRENT_TIMESTAMP "
            f"WHERE id = ? AND {scope['parent_column']} = ?",
            (index, item_id, parent_id)
        )


def _validation_error(e):
    return jsonify({'error': e.message, 'details': e.details}), 400


def _list_scope(scope_key, parent_id):
    conn = None
    try:
        conn = get_db_connection()
        _ensure_parent(conn, scope_key, parent_id)
        scope = SCOPES[scope_key]
        rows = conn.execute(
            f"SELECT {LIST_COLUMNS[scope_key]} FROM {scope['table']} "
            f"WHERE {scope['parent_column']} = ? ORDER BY order_index, id",
            (parent_id,)
        ).fetchall()
    except sqlite3.Error as e:
        log_error(db_logger, "Listing failed with database error", scope=scope_key, parent_id=parent_id, error=str(e))
        return jsonify({'error': f'Database error: {str(e)}'}), 500
    finally:
        if conn:
            return_db_connection(conn)

    items = []
    for row in rows:
        item = dict(row)
        if 'content_data' in item:
            try:
                item['content_data'] = json.loads(item['content_data']) if item['content_data'] else {}
            except ValueError:
                item['content_data'] = {}
        items.append(item)
    return jsonify(items)


def _reorder_scope(scope_key, parent_id, ordered_ids):
    """Replace the order of a whole scope; the id set must match exactly."""
    try:
        with get_db_cursor() as (conn, cursor):
            _ensure_parent(conn, scope_key, parent_id)
            current_ids = _scope_ids(conn, scope_key, parent_id)
            missing = sorted(set(current_ids) - set(ordered_ids))
            unexpected = sorted(set(ordered_ids) - set(current_ids))
            if missing or unexpected:
                details = []
                if missing:
                    details.append(f'missing ids: {missing}')
                if unexpected:
                    details.append(f'ids outside this {SCOPES[scope_key]["label"].lower()}: {unexpected}')
                raise ValidationError('Item ids do not match the current sequence', details)
            _write_order(cursor, scope_key, parent_id, ordered_ids)
    except ValidationError as e:
        log_warning(app_logger, "Reorder rejected", scope=scope_key, parent_id=parent_id, details=e.details)
        return _validation_error(e)
    except sqlite3.Error as e:
        log_error(db_logger, "Reorder failed with database error", scope=scope_key, parent_id=parent_id, error=str(e))
        return jsonify({'error': f'Database error: {str(e)}'}), 500

    log_info(app_logger, "Sequence reordered", scope=scope_key, parent_id=parent_id, ordered_ids=ordered_ids)
    return jsonify({'success': True, 'message': f'{scope_key.capitalize()} reordered successfully'}), 200


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('No data provided', ['body: expected a JSON object'])
    return data


# --- Ordered sequences ---
@outline_api_bp.route('/courses/<int:course_id>/modules', methods=['GET'])
def api_list_modules(course_id):
    return _list_scope('modules', course_id)


@outline_api_bp.route('/modules/<int:module_id>/chapters', methods=['GET'])
def api_list_chapters(module_id):
    return _list_scope('chapters', module_id)


@outline_api_bp.route('/chapters/<int:chapter_id>/content', methods=['GET'])
def api_list_content(chapter_id):
    return _list_scope('content', chapter_id)


# --- Reordering ---
@outline_api_bp.route('/courses/<int:course_id>/modules/reorder', methods=['POST'])
@rate_limit('reorder')
def api_reorder_modules(course_id):
    try:
        data = _json_body()
        module_ids = validate_id_list(data.get('moduleIds'), 'moduleIds')
    except ValidationError as e:
        return _validation_error(e)
    return _reorder_scope('modules', course_id, module_ids)


@outline_api_bp.route('/modules/<int:module_id>/chapters/reorder', methods=['POST'])
@rate_limit('reorder')
def api_reorder_chapters(module_id):
    try:
        data = _json_body()
        chapter_ids = validate_id_list(data.get('chapterIds'), 'chapterIds')
    except ValidationError as e:
        return _validation_error(e)
    return _reorder_scope('chapters', module_id, chapter_ids)


@outline_api_bp.route('/content/reorder', methods=['PATCH'])
@rate_limit('reorder')
def api_reorder_content():
    try:
        data = _json_body()
        chapter_id = validate_positive_id(data.get('chapterId'), 'chapterId')
        content_item_ids = validate_id_list(data.get('contentItemIds'), 'contentItemIds')
    except ValidationError as e:
        return _validation_error(e)
    return _reorder_scope('content', chapter_id, content_item_ids)


# --- Moving chapters between modules ---
@outline_api_bp.route('/chapters/<int:chapter_id>/move', methods=['POST'])
@rate_limit('reorder')
def api_move_chapter(chapter_id):
    try:
        data = _json_body()
        target_module_id = validate_positive_id(data.get('targetModuleId'), 'targetModuleId')
        target_index = validate_optional_index(data.get('targetOrderIndex'), 'targetOrderIndex')
    except ValidationError as e:
        return _validation_error(e)

    try:
        with get_db_cursor() as (conn, cursor):
            chapter = conn.execute(
                "SELECT c.id, c.module_id, m.course_id FROM chapters c JOIN modules m ON c.module_id = m.id WHERE c.id = ?",
                (chapter_id,)
            ).fetchone()
            if not chapter:
                raise NotFound('Chapter not found')
            target = conn.execute("SELECT id, course_id FROM modules WHERE id = ?", (target_module_id,)).fetchone()
            if not target:
                raise NotFound('Target module not found')
            if target['course_id'] != chapter['course_id']:
                raise ValidationError('Validation failed', ['targetModuleId: module belongs to another course'])

            source_module_id = chapter['module_id']
            source_ids = [i for i in _scope_ids(conn, 'chapters', source_module_id) if i != chapter_id]
            if target_module_id == source_module_id:
                target_ids = list(source_ids)
            else:
                target_ids = _scope_ids(conn, 'chapters', target_module_id)

            position = len(target_ids) if target_index is None else min(target_index, len(target_ids))
            target_ids.insert(position, chapter_id)

            cursor.execute(
                "UPDATE chapters SET module_id = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (target_module_id, chapter_id)
            )
            if target_module_id != source_module_id:
                _write_order(cursor, 'chapters', source_module_id, source_ids)
            _write_order(cursor, 'chapters', target_module_id, target_ids)
    except ValidationError as e:
        return _validation_error(e)
    except sqlite3.Error as e:
        log_error(db_logger, "Chapter move failed with database error", chapter_id=chapter_id, error=str(e))
        return jsonify({'error': f'Database error: {str(e)}'}), 500

    log_info(app_logger, "Chapter moved", chapter_id=chapter_id, from_module=source_module_id,
             to_module=target_module_id, order_index=position)
    return jsonify({
        'success': True,
        'message': 'Chapter moved successfully',
        'data': {'id': chapter_id, 'module_id': target_module_id, 'order_index': position}
    }), 200
