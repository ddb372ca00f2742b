from conftest import FlaskSession, ManualScheduler
from outline.config import ReorderSettings
from outline.editor import CourseOutlineEditor
from outline.models import ids_of
from outline.notifications import Notifier
from outline.status import ReorderStatus
from outline.store import ApiItemStore
from utils.rate_limiter import rate_limiter


def listed_ids(client, path):
    response = client.get(path)
    assert response.status_code == 200
    return [row['id'] for row in response.get_json()]


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json()['status'] == 'healthy'


def test_lists_are_ordered_by_position(client):
    assert listed_ids(client, '/api/courses/1/modules') == [10, 11, 12]
    assert listed_ids(client, '/api/modules/10/chapters') == [100, 101, 102]
    content = client.get('/api/chapters/100/content').get_json()
    assert [row['id'] for row in content] == [1000, 1001, 1002]
    assert content[0]['content_data'] == {'body': 'text 1000'}


def test_unknown_parent_is_404(client):
    response = client.get('/api/courses/99/modules')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Course not found'

    response = client.post('/api/modules/99/chapters/reorder', json={'chapterIds': [1]})
    assert response.status_code == 404


def test_reorder_modules_persists_order(client):
    response = client.post('/api/courses/1/modules/reorder', json={'moduleIds': [12, 10, 11]})
    assert response.status_code == 200
    assert response.get_json()['success'] is True
    assert listed_ids(client, '/api/courses/1/modules') == [12, 10, 11]

    # Replaying the same order is harmless
    response = client.post('/api/courses/1/modules/reorder', json={'moduleIds': [12, 10, 11]})
    assert response.status_code == 200
    assert listed_ids(client, '/api/courses/1/modules') == [12, 10, 11]


def test_reorder_chapters_and_content(client):
    response = client.post('/api/modules/10/chapters/reorder', json={'chapterIds': [102, 100, 101]})
    assert response.status_code == 200
    assert listed_ids(client, '/api/modules/10/chapters') == [102, 100, 101]

    response = client.patch('/api/content/reorder', json={'chapterId': 101, 'contentItemIds': [1011, 1010]})
    assert response.status_code == 200
    assert listed_ids(client, '/api/chapters/101/content') == [1011, 1010]
    assert listed_ids(client, '/api/chapters/100/content') == [1000, 1001, 1002]


def test_reorder_rejects_mismatched_ids(client):
    response = client.post('/api/courses/1/modules/reorder', json={'moduleIds': [12, 10]})
    assert response.status_code == 400
    body = response.get_json()
    assert body['error'] == 'Item ids do not match the current sequence'
    assert body['details'] == ['missing ids: [11]']

    response = client.post('/api/courses/1/modules/reorder', json={'moduleIds': [12, 10, 11, 20]})
    assert response.status_code == 400
    assert listed_ids(client, '/api/courses/1/modules') == [10, 11, 12]


def test_reorder_rejects_malformed_bodies(client):
    assert client.post('/api/courses/1/modules/reorder', data='nope').status_code == 400
    assert client.post('/api/courses/1/modules/reorder', json={'moduleIds': []}).status_code == 400
    assert client.post('/api/courses/1/modules/reorder', json={'moduleIds': [10, 10, 11]}).status_code == 400
    assert client.post('/api/courses/1/modules/reorder', json={'moduleIds': ['10', 11, 12]}).status_code == 400
    assert client.patch('/api/content/reorder', json={'contentItemIds': [1000]}).status_code == 400


def test_move_chapter_between_modules(client):
    response = client.post('/api/chapters/101/move', json={'targetModuleId': 11, 'targetOrderIndex': 0})
    assert response.status_code == 200
    assert response.get_json()['data'] == {'id': 101, 'module_id': 11, 'order_index': 0}
    assert listed_ids(client, '/api/modules/10/chapters') == [100, 102]
    assert listed_ids(client, '/api/modules/11/chapters') == [101, 110]


def test_move_chapter_appends_without_index(client):
    response = client.post('/api/chapters/100/move', json={'targetModuleId': 11})
    assert response.get_json()['data']['order_index'] == 1
    assert listed_ids(client, '/api/modules/11/chapters') == [110, 100]


def test_move_chapter_rejects_other_course_and_unknown_rows(client):
    assert client.post('/api/chapters/100/move', json={'targetModuleId': 20}).status_code == 400
    assert client.post('/api/chapters/100/move', json={'targetModuleId': 99}).status_code == 404
    assert client.post('/api/chapters/999/move', json={'targetModuleId': 11}).status_code == 404
    assert listed_ids(client, '/api/modules/10/chapters') == [100, 101, 102]


def test_security_headers_and_scanner_block(client):
    response = client.get('/api/courses/1/modules')
    assert response.headers['X-Frame-Options'] == 'DENY'
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
    assert response.headers['Cache-Control'] == 'no-store'

    response = client.get('/api/courses/1/modules', headers={'User-Agent': 'sqlmap/1.7'})
    assert response.status_code == 403


def test_reorder_is_rate_limited(client, monkeypatch):
    monkeypatch.setitem(rate_limiter.limits, 'reorder', {'max_requests': 1, 'window_seconds': 60})
    assert client.post('/api/courses/1/modules/reorder', json={'moduleIds': [10, 11, 12]}).status_code == 200
    assert client.post('/api/courses/1/modules/reorder', json={'moduleIds': [10, 11, 12]}).status_code == 429


def test_editor_round_trip_through_service(client):
    scheduler = ManualScheduler()
    notifier = Notifier()
    store = ApiItemStore('http://outline.test', session=FlaskSession(client))
    editor = CourseOutlineEditor(1, store, scheduler=scheduler, notifier=notifier, settings=ReorderSettings())

    assert editor.load() is True
    assert ids_of(editor.modules.items) == [10, 11, 12]

    editor.modules.request_reorder(12, 2, 0)
    scheduler.advance(0.5)
    assert editor.modules.status is ReorderStatus.SUCCESS
    assert listed_ids(client, '/api/courses/1/modules') == [12, 10, 11]

    content = editor.open_chapter(100)
    content.enter_manual_reorder_mode()
    content.handle_key(1000, 'end')
    assert content.commit() is True
    assert listed_ids(client, '/api/chapters/100/content') == [1001, 1002, 1000]

    # A chapter moved in elsewhere makes the stale full-list save fail and roll back
    chapters = editor.open_module(10)
    client.post('/api/chapters/110/move', json={'targetModuleId': 10})
    chapters.request_reorder(101, 1, 0)
    scheduler.advance(0.5)
    assert chapters.status is ReorderStatus.ERROR
    assert ids_of(chapters.items) == [100, 101, 102]
    assert notifier.history[-1].description == 'Please check the submitted order and try again'
