import re

import pytest

from affiflow.extensions import db
from affiflow.models import AnalyticsEvent, AnalyticsEventType, PostProduct


@pytest.fixture
def workspace(owner, create_workspace):
    return create_workspace(owner)


@pytest.fixture
def posts_url(workspace):
    return f"/api/workspaces/{workspace['id']}/posts"


@pytest.fixture
def make_product(client, owner, workspace):
    def _make_product(name='Ceramic Vase', **extra):
        resp = client.post(
            f"/api/workspaces/{workspace['id']}/products",
            json={'name': name, **extra},
            headers=owner.headers,
        )
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()['data']

    return _make_product


def _create_post(client, owner, posts_url, **payload):
    payload.setdefault('title', 'Living Room Tour')
    resp = client.post(posts_url, json=payload, headers=owner.headers)
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['data']


def test_create_post_derives_slug(client, owner, posts_url):
    post = _create_post(client, owner, posts_url, title='Living Room Tour!', videoType='YOUTUBE')

    assert post['slug'] == 'living-room-tour'
    assert post['videoType'] == 'YOUTUBE'
    assert post['isPublished'] is False
    assert post['publishedAt'] is None
    assert post['products'] == []


def test_duplicate_post_slug_gets_suffix(client, owner, posts_url):
    first = _create_post(client, owner, posts_url)
    second = _create_post(client, owner, posts_url)

    assert first['slug'] == 'living-room-tour'
    assert re.fullmatch(r'living-room-tour-[a-z0-9]{6}', second['slug'])


def test_deleted_post_frees_its_slug(client, owner, posts_url):
    first = _create_post(client, owner, posts_url)
    resp = client.delete(f"{posts_url}/{first['id']}", headers=owner.headers)
    assert resp.get_json()['message'] == 'Post deleted successfully'

    second = _create_post(client, owner, posts_url)
    assert second['slug'] == 'living-room-tour'


def test_empty_slug_falls_back(client, owner, posts_url):
    post = _create_post(client, owner, posts_url, title='???')
    assert post['slug'] == 'post'


def test_publish_sets_and_unpublish_clears_timestamp(client, owner, posts_url):
    post = _create_post(client, owner, posts_url, isPublished=True)
    assert post['isPublished'] is True
    published_at = post['publishedAt']
    assert published_at is not None

    url = f"{posts_url}/{post['id']}"
    resp = client.put(url, json={'isPublished': True}, headers=owner.headers)
    assert resp.get_json()['data']['publishedAt'] == published_at

    resp = client.put(url, json={'isPublished': False}, headers=owner.headers)
    data = resp.get_json()['data']
    assert data['isPublished'] is False
    assert data['publishedAt'] is None


def test_create_post_with_products(client, owner, posts_url, make_product):
    vase = make_product()
    lamp = make_product('Floor Lamp')

    post = _create_post(client, owner, posts_url, productIds=[vase['id'], lamp['id'], vase['id']])

    assert sorted(p['productId'] for p in post['products']) == sorted([vase['id'], lamp['id']])
    assert post['_count'] == {'products': 2}


def test_create_post_rejects_foreign_products(client, owner, outsider, create_workspace, posts_url):
    foreign = create_workspace(outsider, name='Foreign')
    resp = client.post(
        f"/api/workspaces/{foreign['id']}/products",
        json={'name': 'Not yours'},
        headers=outsider.headers,
    )
    foreign_product = resp.get_json()['data']

    resp = client.post(posts_url, json={'title': 'Sneaky', 'productIds': [foreign_product['id']]}, headers=owner.headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Some products not found or access denied'


def test_update_replaces_products_atomically(app, client, owner, posts_url, make_product):
    vase = make_product()
    lamp = make_product('Floor Lamp')
    post = _create_post(client, owner, posts_url, productIds=[vase['id']])
    url = f"{posts_url}/{post['id']}"

    resp = client.put(url, json={'productIds': [lamp['id']]}, headers=owner.headers)
    assert [p['productId'] for p in resp.get_json()['data']['products']] == [lamp['id']]

    resp = client.put(url, json={'productIds': [vase['id'], 'missing'], 'title': 'Changed'}, headers=owner.headers)
    assert resp.status_code == 400

    with app.app_context():
        linked = [pp.product_id for pp in db.session.query(PostProduct).filter_by(post_id=post['id'])]
        assert linked == [lamp['id']]

    resp = client.get(url, headers=owner.headers)
    assert resp.get_json()['data']['title'] == 'Living Room Tour'

    resp = client.put(url, json={'productIds': []}, headers=owner.headers)
    assert resp.get_json()['data']['products'] == []


def test_update_without_product_ids_keeps_products(client, owner, posts_url, make_product):
    vase = make_product()
    post = _create_post(client, owner, posts_url, productIds=[vase['id']])

    resp = client.put(f"{posts_url}/{post['id']}", json={'content': 'More words'}, headers=owner.headers)
    data = resp.get_json()['data']
    assert data['content'] == 'More words'
    assert [p['productId'] for p in data['products']] == [vase['id']]


def test_retitle_regenerates_slug(client, owner, posts_url):
    post = _create_post(client, owner, posts_url)
    resp = client.put(f"{posts_url}/{post['id']}", json={'title': 'Kitchen Tour'}, headers=owner.headers)
    assert resp.get_json()['data']['slug'] == 'kitchen-tour'


def test_resending_same_title_keeps_slug(client, owner, posts_url):
    custom = _create_post(client, owner, posts_url, slug='my-custom-slug')
    resp = client.put(
        f"{posts_url}/{custom['id']}",
        json={'title': custom['title'], 'content': 'edit'},
        headers=owner.headers,
    )
    assert resp.get_json()['data']['slug'] == 'my-custom-slug'

    _create_post(client, owner, posts_url, title='Tour')
    suffixed = _create_post(client, owner, posts_url, title='Tour')
    resp = client.put(
        f"{posts_url}/{suffixed['id']}",
        json={'title': 'Tour', 'content': 'edit'},
        headers=owner.headers,
    )
    assert resp.get_json()['data']['slug'] == suffixed['slug']


def test_update_rejects_null_title(client, owner, posts_url):
    post = _create_post(client, owner, posts_url)
    resp = client.put(f"{posts_url}/{post['id']}", json={'title': None}, headers=owner.headers)
    assert resp.status_code == 400


def test_list_excludes_deleted_unless_asked(client, owner, posts_url):
    kept = _create_post(client, owner, posts_url, title='Kept')
    gone = _create_post(client, owner, posts_url, title='Gone')
    client.delete(f"{posts_url}/{gone['id']}", headers=owner.headers)

    data = client.get(posts_url, headers=owner.headers).get_json()['data']
    assert [p['id'] for p in data['posts']] == [kept['id']]
    assert data['pagination']['total'] == 1

    data = client.get(f"{posts_url}?includeDeleted=true", headers=owner.headers).get_json()['data']
    assert {p['id'] for p in data['posts']} == {kept['id'], gone['id']}

    resp = client.get(f"{posts_url}/{gone['id']}", headers=owner.headers)
    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'Post not found'


def test_list_pagination_and_filters(client, owner, posts_url):
    for i in range(5):
        _create_post(client, owner, posts_url, title=f'Draft {i}')
    _create_post(client, owner, posts_url, title='Sofa review', content='comfy', isPublished=True)

    data = client.get(f"{posts_url}?page=2&limit=4", headers=owner.headers).get_json()['data']
    assert len(data['posts']) == 2
    assert data['pagination'] == {'page': 2, 'limit': 4, 'total': 6, 'pages': 2}

    data = client.get(f"{posts_url}?search=SOFA", headers=owner.headers).get_json()['data']
    assert [p['title'] for p in data['posts']] == ['Sofa review']

    data = client.get(f"{posts_url}?published=true", headers=owner.headers).get_json()['data']
    assert [p['title'] for p in data['posts']] == ['Sofa review']

    data = client.get(f"{posts_url}?published=false", headers=owner.headers).get_json()['data']
    assert data['pagination']['total'] == 5


def test_bad_page_parameter(client, owner, posts_url):
    resp = client.get(f"{posts_url}?page=abc", headers=owner.headers)
    assert resp.status_code == 400


def test_get_post_records_view(app, client, owner, posts_url):
    post = _create_post(client, owner, posts_url)

    resp = client.get(f"{posts_url}/{post['id']}", headers=owner.headers)
    assert resp.get_json()['data']['workspace']['slug'] == 'odecor'

    with app.app_context():
        events = db.session.query(AnalyticsEvent).filter_by(post_id=post['id']).all()
        assert [e.event for e in events] == [AnalyticsEventType.VIEW]


def test_events_and_analytics_summary(client, owner, posts_url, make_product):
    product = make_product()
    post = _create_post(client, owner, posts_url, productIds=[product['id']])
    events_url = f"{posts_url}/{post['id']}/events"

    resp = client.post(events_url, json={'event': 'SHARE'}, headers=owner.headers)
    assert resp.status_code == 200
    assert resp.get_json()['data']['event'] == 'SHARE'

    resp = client.post(
        events_url,
        json={'event': 'PRODUCT_CLICK', 'productId': product['id'], 'metadata': {'source': 'video'}},
        headers=owner.headers,
    )
    assert resp.status_code == 200

    resp = client.post(events_url, json={'event': 'PRODUCT_CLICK'}, headers=owner.headers)
    assert resp.status_code == 400

    resp = client.post(events_url, json={'event': 'DOWNLOAD'}, headers=owner.headers)
    assert resp.status_code == 400

    resp = client.get(f"{posts_url}/{post['id']}/analytics", headers=owner.headers)
    events = resp.get_json()['data']['events']
    assert events == {'VIEW': 0, 'PRODUCT_CLICK': 1, 'SHARE': 1, 'LIKE': 0}


def test_invalid_json_body(client, owner, posts_url):
    resp = client.post(posts_url, data='not json', content_type='application/json', headers=owner.headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Invalid JSON body'


def test_analytics_events_are_append_only(app, client, owner, posts_url):
    post = _create_post(client, owner, posts_url)
    client.get(f"{posts_url}/{post['id']}", headers=owner.headers)

    with app.app_context():
        event = db.session.query(AnalyticsEvent).filter_by(post_id=post['id']).one()
        event.meta = {'edited': True}
        with pytest.raises(PermissionError):
            db.session.flush()
        db.session.rollback()

        db.session.delete(db.session.query(AnalyticsEvent).filter_by(post_id=post['id']).one())
        with pytest.raises(PermissionError):
            db.session.flush()
        db.session.rollback()
