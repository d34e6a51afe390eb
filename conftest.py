# conftest.py
"""
테스트 공용 픽스처.

FakeFirestore 는 엔진이 사용하는 만큼만 Firestore 클라이언트를 흉내 내는 메모리 저장소입니다.
- 하위 컬렉션, 점 표기 필드 업데이트, Increment 변환
- 원자적 배치 (하나라도 실패하면 아무것도 반영되지 않음)
- where(filter=FieldFilter) / order_by / limit 쿼리와 on_snapshot 리스너
- fail_on 으로 특정 작업에 ServiceUnavailable 을 주입
"""
import copy
import uuid

import pytest
from flask_jwt_extended import create_access_token
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.transforms import Increment

from engagement import create_app
from engagement.api.comments.services import CommentService
from engagement.api.content.services import ContentService
from engagement.api.follows.services import FollowService
from engagement.api.likes.services import LikeService
from engagement.services.account_directory import AccountDirectory
from engagement.services.counter_service import CounterService
from engagement.services.dispatch import DetachedDispatcher, INLINE_MODE
from engagement.services.edge_store import EdgeStore
from engagement.services.firestore_service import FirestoreGateway
from engagement.services.notification_service import NotificationService


# ----------------------------------------------------------------------
# 메모리 Firestore
# ----------------------------------------------------------------------
def _set_dotted(data, dotted, value):
    parts = dotted.split('.')
    target = data
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            target[part] = {}
        target = target[part]
    if isinstance(value, Increment):
        value = (target.get(parts[-1]) or 0) + value.value
    target[parts[-1]] = value


def _get_dotted(data, dotted):
    value = data
    for part in dotted.split('.'):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _merge(target, source):
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        elif isinstance(value, Increment):
            target[key] = (target.get(key) or 0) + value.value
        else:
            target[key] = copy.deepcopy(value)


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeWatch:
    def __init__(self, db, listener):
        self._db = db
        self._listener = listener

    def unsubscribe(self):
        if self._listener in self._db.listeners:
            self._db.listeners.remove(self._listener)


class FakeQuery:
    def __init__(self, db, path, filters=(), orders=(), limit_count=None):
        self._db = db
        self._path = tuple(path)
        self._filters = tuple(filters)
        self._orders = tuple(orders)
        self._limit = limit_count

    def where(self, filter=None):
        return FakeQuery(self._db, self._path, self._filters + (filter,), self._orders, self._limit)

    def order_by(self, field_path, direction='ASCENDING'):
        return FakeQuery(self._db, self._path, self._filters, self._orders + ((field_path, direction),), self._limit)

    def limit(self, count):
        return FakeQuery(self._db, self._path, self._filters, self._orders, count)

    def _matches(self, data):
        for f in self._filters:
            value = _get_dotted(data, f.field_path)
            if f.op_string == '==' and value != f.value:
                return False
            if f.op_string == '!=' and value == f.value:
                return False
        return True

    def _snapshots(self):
        docs = [
            (path, data) for path, data in self._db.docs.items()
            if len(path) == len(self._path) + 1 and path[:-1] == self._path and self._matches(data)
        ]
        docs.sort(key=lambda item: item[0][-1])
        for field_path, direction in reversed(self._orders):
            docs.sort(key=lambda item: (_get_dotted(item[1], field_path) is None, _get_dotted(item[1], field_path)),
                      reverse=(direction == 'DESCENDING'))
        if self._limit is not None:
            docs = docs[:self._limit]
        return [FakeSnapshot(FakeDocumentReference(self._db, path), copy.deepcopy(data)) for path, data in docs]

    def stream(self):
        self._db.check('stream')
        return iter(self._snapshots())

    def on_snapshot(self, callback):
        self._db.check('listen')
        listener = (self, callback)
        self._db.listeners.append(listener)
        callback(self._snapshots(), [], None)
        return FakeWatch(self._db, listener)


class FakeCollectionReference(FakeQuery):
    def __init__(self, db, path):
        super().__init__(db, path)
        self.id = path[-1]

    def document(self, doc_id=None):
        return FakeDocumentReference(self._db, self._path + (doc_id or uuid.uuid4().hex[:20],))


class FakeDocumentReference:
    def __init__(self, db, path):
        self._db = db
        self._path = tuple(path)
        self.id = path[-1]

    @property
    def path(self):
        return '/'.join(self._path)

    def collection(self, name):
        return FakeCollectionReference(self._db, self._path + (name,))

    def get(self):
        self._db.check('get')
        return FakeSnapshot(self, copy.deepcopy(self._db.docs.get(self._path)))

    def set(self, data, merge=False):
        self._db.check('set')
        self._db.apply([('set', self._path, data, merge)])

    def update(self, data):
        self._db.check('update')
        self._db.apply([('update', self._path, data, False)])

    def delete(self):
        self._db.check('delete')
        self._db.apply([('delete', self._path, None, False)])


class FakeWriteBatch:
    def __init__(self, db):
        self._db = db
        self.ops = []

    def set(self, ref, data, merge=False):
        self.ops.append(('set', ref._path, data, merge))

    def update(self, ref, data):
        self.ops.append(('update', ref._path, data, False))

    def delete(self, ref):
        self.ops.append(('delete', ref._path, None, False))

    def commit(self):
        self._db.check('commit')
        self._db.apply(self.ops)
        self._db.commits += 1


class FakeFirestore:
    def __init__(self):
        self.docs = {}
        self.listeners = []
        self.fail_on = set()
        self.commits = 0

    # 테스트 편의 함수
    def seed(self, path, data):
        self.docs[tuple(path.split('/'))] = copy.deepcopy(data)

    def data(self, path):
        return copy.deepcopy(self.docs.get(tuple(path.split('/'))))

    def ids(self, collection_path):
        path = tuple(collection_path.split('/'))
        return sorted(p[-1] for p in self.docs if len(p) == len(path) + 1 and p[:-1] == path)

    def check(self, op):
        if op in self.fail_on:
            raise google_exceptions.ServiceUnavailable(f"injected failure: {op}")

    # 클라이언트 API
    def collection(self, name):
        return FakeCollectionReference(self, (name,))

    def batch(self):
        return FakeWriteBatch(self)

    def apply(self, ops):
        """모든 작업을 사본에 적용한 뒤 한 번에 교체합니다. 중간에 실패하면 아무것도 바뀌지 않습니다."""
        docs = copy.deepcopy(self.docs)
        for kind, path, data, merge in ops:
            if kind == 'delete':
                docs.pop(path, None)
            elif kind == 'set':
                if merge and path in docs:
                    _merge(docs[path], data)
                else:
                    docs[path] = {}
                    _merge(docs[path], data)
            elif kind == 'update':
                if path not in docs:
                    raise google_exceptions.NotFound(f"No document to update: {'/'.join(path)}")
                for key, value in data.items():
                    _set_dotted(docs[path], key, copy.deepcopy(value))
        self.docs = docs
        for query, callback in list(self.listeners):
            callback(query._snapshots(), [], None)


# ----------------------------------------------------------------------
# 픽스처
# ----------------------------------------------------------------------
@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def gateway(fake_db):
    return FirestoreGateway(client=fake_db)


@pytest.fixture
def dispatcher():
    return DetachedDispatcher(mode=INLINE_MODE)


@pytest.fixture
def edges(gateway):
    return EdgeStore(gateway)


@pytest.fixture
def counters(gateway):
    return CounterService(gateway)


@pytest.fixture
def accounts(gateway):
    return AccountDirectory(gateway)


@pytest.fixture
def notification_service(gateway, accounts, edges):
    return NotificationService(gateway, accounts, edges)


@pytest.fixture
def like_service(gateway, edges, counters, notification_service, dispatcher):
    return LikeService(gateway, edges, counters, notification_service, dispatcher)


@pytest.fixture
def follow_service(gateway, edges, counters, notification_service, accounts, dispatcher):
    return FollowService(gateway, edges, counters, notification_service, accounts, dispatcher)


@pytest.fixture
def comment_service(gateway, counters, notification_service, accounts, dispatcher):
    return CommentService(gateway, counters, notification_service, accounts, dispatcher)


@pytest.fixture
def content_service(gateway, edges, notification_service, dispatcher, comment_service):
    return ContentService(gateway, edges, notification_service, dispatcher, comments=comment_service)


@pytest.fixture
def seed_user(fake_db):
    """users/{id} 프로필을 만듭니다."""
    def _seed(user_id, name=None, username=None, avatar='', followers=0, following=0):
        fake_db.seed(f"users/{user_id}", {
            "name": name or user_id.capitalize(),
            "username": username or user_id,
            "avatar": avatar,
            "stats": {"followers": followers, "following": following},
        })
    return _seed


@pytest.fixture
def app(fake_db):
    app = create_app('testing', db=fake_db)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """auth_headers('alice') -> Authorization 헤더 dict"""
    def _headers(user_id):
        with app.app_context():
            token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}
    return _headers
