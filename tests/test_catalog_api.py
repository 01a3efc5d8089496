import pytest

from affiflow.extensions import db
from affiflow.models import AffiliateLink, Product


@pytest.fixture
def workspace(owner, create_workspace):
    return create_workspace(owner)


@pytest.fixture
def api(client, owner, workspace):
    """Issue owner requests against paths relative to the workspace."""
    base = f"/api/workspaces/{workspace['id']}"

    def _call(method, path, **kwargs):
        return client.open(base + path, method=method, headers=owner.headers, **kwargs)

    return _call


def _data(resp):
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['data']


def _link_payload(product_id, url='https://shopee.vn/vase-1', **extra):
    return {
        'name': 'Shopee deal',
        'productId': product_id,
        'originalUrl': 'https://shopee.vn/original',
        'affiliateUrl': url,
        **extra,
    }


# Categories ----------------------------------------------------------

def test_category_crud(api):
    category = _data(api('POST', '/categories', json={'name': 'Decor', 'color': '#aabbcc'}))
    assert category['_count'] == {'products': 0}

    updated = _data(api('PUT', f"/categories/{category['id']}", json={'description': 'Home decor'}))
    assert updated['name'] == 'Decor'
    assert updated['description'] == 'Home decor'

    listed = _data(api('GET', '/categories'))
    assert [c['id'] for c in listed] == [category['id']]

    resp = api('DELETE', f"/categories/{category['id']}")
    assert resp.get_json()['message'] == 'Category deleted successfully'
    assert api('GET', f"/categories/{category['id']}").status_code == 404


def test_category_name_conflict(api):
    _data(api('POST', '/categories', json={'name': 'Decor'}))
    other = _data(api('POST', '/categories', json={'name': 'Kitchen'}))

    resp = api('POST', '/categories', json={'name': 'Decor'})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Category name already exists'

    resp = api('PUT', f"/categories/{other['id']}", json={'name': 'Decor'})
    assert resp.status_code == 400


def test_category_color_is_validated(api):
    resp = api('POST', '/categories', json={'name': 'Decor', 'color': 'red'})
    assert resp.status_code == 400
    assert resp.get_json()['details'][0]['field'] == 'color'


def test_category_with_products_cannot_be_deleted(api):
    category = _data(api('POST', '/categories', json={'name': 'Decor'}))
    _data(api('POST', '/products', json={'name': 'Vase', 'categoryId': category['id']}))

    resp = api('DELETE', f"/categories/{category['id']}")
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Category has 1 product(s). Remove products from category first.'

    detail = _data(api('GET', f"/categories/{category['id']}"))
    assert [p['name'] for p in detail['products']] == ['Vase']


# Products ------------------------------------------------------------

def test_product_defaults_and_filters(api):
    category = _data(api('POST', '/categories', json={'name': 'Decor'}))
    vase = _data(api('POST', '/products', json={'name': 'Vase', 'price': 250000, 'categoryId': category['id']}))
    _data(api('POST', '/products', json={'name': 'Lamp', 'description': 'warm light'}))

    assert vase['currency'] == 'VND'
    assert vase['category'] == {'id': category['id'], 'name': 'Decor', 'color': None}

    data = _data(api('GET', f"/products?categoryId={category['id']}"))
    assert [p['name'] for p in data['products']] == ['Vase']

    data = _data(api('GET', '/products?search=WARM'))
    assert [p['name'] for p in data['products']] == ['Lamp']
    assert data['pagination']['total'] == 1


def test_product_validation(api):
    assert api('POST', '/products', json={'name': 'Vase', 'price': -1}).status_code == 400
    assert api('POST', '/products', json={'name': 'Vase', 'currency': 'DONG'}).status_code == 400
    assert api('POST', '/products', json={'name': 'Vase', 'image': 'not a url'}).status_code == 400


def test_product_rejects_foreign_category(api, client, outsider, create_workspace):
    foreign = create_workspace(outsider, name='Foreign')
    resp = client.post(
        f"/api/workspaces/{foreign['id']}/categories",
        json={'name': 'Theirs'},
        headers=outsider.headers,
    )
    foreign_category = resp.get_json()['data']

    resp = api('POST', '/products', json={'name': 'Vase', 'categoryId': foreign_category['id']})
    assert resp.status_code == 400
    assert resp.get_json()['details'][0]['field'] == 'categoryId'


def test_product_empty_reference_is_ignored_and_null_clears(api):
    category = _data(api('POST', '/categories', json={'name': 'Decor'}))
    product = _data(api('POST', '/products', json={'name': 'Vase', 'categoryId': ''}))
    assert product['categoryId'] is None

    url = f"/products/{product['id']}"
    assert _data(api('PUT', url, json={'categoryId': category['id']}))['categoryId'] == category['id']
    assert _data(api('PUT', url, json={'categoryId': ''}))['categoryId'] == category['id']
    assert _data(api('PUT', url, json={'categoryId': None}))['categoryId'] is None


def test_product_used_in_post_cannot_be_deleted(api):
    product = _data(api('POST', '/products', json={'name': 'Vase'}))
    _data(api('POST', '/posts', json={'title': 'Tour', 'productIds': [product['id']]}))

    resp = api('DELETE', f"/products/{product['id']}")
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Product is used in 1 post(s). Remove from posts first.'


def test_product_delete_removes_links(app, api):
    product = _data(api('POST', '/products', json={'name': 'Vase'}))
    link = _data(api('POST', '/affiliate-links', json=_link_payload(product['id'])))
    _data(api('POST', f"/affiliate-links/{link['id']}/set-active"))

    resp = api('DELETE', f"/products/{product['id']}")
    assert resp.status_code == 200

    with app.app_context():
        assert db.session.get(Product, product['id']) is None
        assert db.session.get(AffiliateLink, link['id']) is None


# Affiliate links -----------------------------------------------------

def test_link_platform_is_detected(api):
    product = _data(api('POST', '/products', json={'name': 'Vase'}))

    shopee = _data(api('POST', '/affiliate-links', json=_link_payload(product['id'])))
    assert shopee['platform'] == 'shopee'
    assert shopee['isActive'] is False
    assert shopee['commissionType'] == 'percentage'

    explicit = _data(api('POST', '/affiliate-links', json=_link_payload(
        product['id'], url='https://example.com/deal', platform='partner',
    )))
    assert explicit['platform'] == 'partner'

    fallback = _data(api('POST', '/affiliate-links', json=_link_payload(product['id'], url='https://example.com/x')))
    assert fallback['platform'] == 'other'


def test_duplicate_affiliate_url_per_product(api):
    vase = _data(api('POST', '/products', json={'name': 'Vase'}))
    lamp = _data(api('POST', '/products', json={'name': 'Lamp'}))
    _data(api('POST', '/affiliate-links', json=_link_payload(vase['id'])))

    resp = api('POST', '/affiliate-links', json=_link_payload(vase['id']))
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Affiliate URL already exists for this product'

    _data(api('POST', '/affiliate-links', json=_link_payload(lamp['id'])))


def test_link_validation(api):
    product = _data(api('POST', '/products', json={'name': 'Vase'}))
    assert api('POST', '/affiliate-links', json=_link_payload(product['id'], url='shopee')).status_code == 400
    assert api('POST', '/affiliate-links', json=_link_payload(product['id'], commission=150)).status_code == 400
    assert api('POST', '/affiliate-links', json=_link_payload('missing')).status_code == 404


def test_single_active_link_per_product(api):
    product = _data(api('POST', '/products', json={'name': 'Vase'}))
    first = _data(api('POST', '/affiliate-links', json=_link_payload(product['id'])))
    second = _data(api('POST', '/affiliate-links', json=_link_payload(product['id'], url='https://tiki.vn/vase')))

    data = _data(api('POST', f"/affiliate-links/{first['id']}/set-active"))
    assert data['product']['activeAffiliateLinkId'] == first['id']
    assert data['activeLink']['isActive'] is True

    _data(api('POST', f"/affiliate-links/{second['id']}/set-active"))
    links = {link['id']: link for link in _data(api('GET', f"/products/{product['id']}/affiliate-links"))}
    assert links[first['id']]['isActive'] is False
    assert links[second['id']]['isActive'] is True

    # Clearing a link that is not active changes nothing
    resp = api('DELETE', f"/affiliate-links/{first['id']}/set-active")
    assert resp.get_json()['message'] == 'Active status removed successfully'
    assert _data(api('GET', f"/products/{product['id']}"))['activeAffiliateLinkId'] == second['id']

    api('DELETE', f"/affiliate-links/{second['id']}/set-active")
    assert _data(api('GET', f"/products/{product['id']}"))['activeAffiliateLinkId'] is None


def test_set_active_unknown_link(api):
    resp = api('POST', '/affiliate-links/missing/set-active')
    assert resp.status_code == 404


def test_deleting_active_link_clears_product(api):
    product = _data(api('POST', '/products', json={'name': 'Vase'}))
    link = _data(api('POST', '/affiliate-links', json=_link_payload(product['id'])))
    _data(api('POST', f"/affiliate-links/{link['id']}/set-active"))

    resp = api('DELETE', f"/affiliate-links/{link['id']}")
    assert resp.status_code == 200
    assert _data(api('GET', f"/products/{product['id']}"))['activeAffiliateLinkId'] is None


def test_moving_active_link_clears_old_product(api):
    vase = _data(api('POST', '/products', json={'name': 'Vase'}))
    lamp = _data(api('POST', '/products', json={'name': 'Lamp'}))
    link = _data(api('POST', '/affiliate-links', json=_link_payload(vase['id'])))
    _data(api('POST', f"/affiliate-links/{link['id']}/set-active"))

    moved = _data(api('PUT', f"/affiliate-links/{link['id']}", json={'productId': lamp['id']}))
    assert moved['productId'] == lamp['id']
    assert moved['isActive'] is False
    assert _data(api('GET', f"/products/{vase['id']}"))['activeAffiliateLinkId'] is None


def test_product_active_link_must_belong_to_product(api):
    vase = _data(api('POST', '/products', json={'name': 'Vase'}))
    lamp = _data(api('POST', '/products', json={'name': 'Lamp'}))
    link = _data(api('POST', '/affiliate-links', json=_link_payload(lamp['id'])))

    resp = api('PUT', f"/products/{vase['id']}", json={'activeAffiliateLinkId': link['id']})
    assert resp.status_code == 400

    resp = api('POST', '/products', json={'name': 'New', 'activeAffiliateLinkId': link['id']})
    assert resp.status_code == 400

    data = _data(api('PUT', f"/products/{lamp['id']}", json={'activeAffiliateLinkId': link['id']}))
    assert data['activeAffiliateLinkId'] == link['id']


def test_click_counts_follow_the_active_link(api):
    product = _data(api('POST', '/products', json={'name': 'Vase'}))
    first = _data(api('POST', '/affiliate-links', json=_link_payload(product['id'])))
    second = _data(api('POST', '/affiliate-links', json=_link_payload(product['id'], url='https://tiki.vn/vase')))
    post = _data(api('POST', '/posts', json={'title': 'Tour', 'productIds': [product['id']]}))
    events = f"/posts/{post['id']}/events"

    _data(api('POST', f"/affiliate-links/{first['id']}/set-active"))
    _data(api('POST', events, json={'event': 'PRODUCT_CLICK', 'productId': product['id']}))
    _data(api('POST', events, json={'event': 'PRODUCT_CLICK', 'productId': product['id']}))
    _data(api('POST', events, json={'event': 'PRODUCT_CLICK', 'affiliateLinkId': second['id']}))

    resp = api('POST', events, json={
        'event': 'PRODUCT_CLICK',
        'productId': post['id'],
        'affiliateLinkId': second['id'],
    })
    assert resp.status_code == 404

    assert _data(api('GET', f"/affiliate-links/{first['id']}"))['_count'] == {'clicks': 2}
    assert _data(api('GET', f"/affiliate-links/{second['id']}"))['_count'] == {'clicks': 1}


def test_odecor_scenario(client, owner, create_workspace):
    """Sign up, open a workspace, build a catalog and publish a tagged post."""
    workspace = create_workspace(owner, name='Odecor')
    assert workspace['slug'] == 'odecor'
    base = f"/api/workspaces/{workspace['id']}"

    def call(method, path, **kwargs):
        return _data(client.open(base + path, method=method, headers=owner.headers, **kwargs))

    category = call('POST', '/categories', json={'name': 'Living room', 'color': '#336699'})
    product = call('POST', '/products', json={
        'name': 'Rattan armchair',
        'price': 1890000,
        'categoryId': category['id'],
    })
    link = call('POST', '/affiliate-links', json=_link_payload(product['id'], url='https://shopee.vn/armchair'))
    call('POST', f"/affiliate-links/{link['id']}/set-active")

    post = call('POST', '/posts', json={
        'title': 'Cozy living room makeover',
        'videoUrl': 'https://www.youtube.com/watch?v=abc',
        'videoType': 'YOUTUBE',
        'isPublished': True,
        'productIds': [product['id']],
    })
    assert post['slug'] == 'cozy-living-room-makeover'
    assert post['products'][0]['product']['activeAffiliateLinkId'] == link['id']

    call('GET', f"/posts/{post['id']}")
    call('POST', f"/posts/{post['id']}/events", json={'event': 'PRODUCT_CLICK', 'productId': product['id']})

    summary = call('GET', f"/posts/{post['id']}/analytics")['events']
    assert summary['VIEW'] == 1
    assert summary['PRODUCT_CLICK'] == 1

    links = call('GET', '/affiliate-links')
    assert links[0]['_count'] == {'clicks': 1}
    assert links[0]['isActive'] is True

    products = call('GET', '/products')['products']
    assert products[0]['_count'] == {'posts': 1}

    resp = client.get('/api/workspaces/by-slug/odecor', headers=owner.headers)
    assert resp.get_json()['data']['postCount'] == 1

    resp = client.delete(f"{base}/categories/{category['id']}", headers=owner.headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Category has 1 product(s). Remove products from category first.'

    assert call('GET', f"/products/{product['id']}")['categoryId'] == category['id']
    assert [c['id'] for c in call('GET', '/categories')] == [category['id']]
