import re

from affiflow.extensions import db
from affiflow.models import Membership, Workspace, WorkspaceRole


def test_create_workspace_makes_caller_owner(app, client, owner, create_workspace):
    data = create_workspace(owner, description='Home decor picks')

    assert data['slug'] == 'odecor'
    assert data['description'] == 'Home decor picks'
    assert data['_count'] == {'posts': 0}
    assert [(m['userId'], m['role']) for m in data['users']] == [(owner.id, 'OWNER')]

    with app.app_context():
        membership = db.session.query(Membership).filter_by(workspace_id=data['id']).one()
        assert membership.role is WorkspaceRole.OWNER


def test_slug_collision_gets_suffix(client, owner, outsider, create_workspace):
    first = create_workspace(owner)
    second = create_workspace(outsider)

    assert first['slug'] == 'odecor'
    assert re.fullmatch(r'odecor-[a-z0-9]{6}', second['slug'])
    assert second['slug'] != first['slug']


def test_soft_deleted_workspace_keeps_its_slug(client, owner, create_workspace):
    first = create_workspace(owner)
    resp = client.delete(f"/api/workspaces/{first['id']}", headers=owner.headers)
    assert resp.status_code == 200

    second = create_workspace(owner)
    assert re.fullmatch(r'odecor-[a-z0-9]{6}', second['slug'])


def test_requested_slug_is_used_when_valid(client, owner, create_workspace):
    data = create_workspace(owner, name='Anything', slug='my-shop')
    assert data['slug'] == 'my-shop'

    fallback = create_workspace(owner, name='Other Shop', slug='Not A Slug!')
    assert fallback['slug'] == 'other-shop'


def test_unsluggable_name_still_gets_a_slug(client, owner, create_workspace):
    data = create_workspace(owner, name='!!')
    assert re.fullmatch(r'workspace-[a-z0-9]{6}', data['slug'])


def test_create_workspace_validation(client, owner):
    resp = client.post('/api/workspaces', json={'name': ''}, headers=owner.headers)
    assert resp.status_code == 400
    body = resp.get_json()
    assert body['success'] is False
    assert body['error'] == 'Validation failed'
    assert body['details'][0]['field'] == 'name'

    resp = client.post('/api/workspaces', json={'name': 'x' * 51}, headers=owner.headers)
    assert resp.status_code == 400


def test_create_workspace_requires_authentication(client):
    resp = client.post('/api/workspaces', json={'name': 'Odecor'})
    assert resp.status_code == 401
    assert resp.get_json() == {'success': False, 'error': 'Unauthorized'}


def test_list_excludes_deleted_and_foreign_workspaces(client, owner, outsider, create_workspace):
    kept = create_workspace(owner, name='Kept')
    gone = create_workspace(owner, name='Gone')
    create_workspace(outsider, name='Foreign')
    client.delete(f"/api/workspaces/{gone['id']}", headers=owner.headers)

    resp = client.get('/api/workspaces', headers=owner.headers)
    assert resp.status_code == 200
    slugs = [w['slug'] for w in resp.get_json()['data']]
    assert slugs == [kept['slug']]


def test_by_slug_returns_summary_for_members_only(client, owner, outsider, create_workspace):
    workspace = create_workspace(owner)

    resp = client.get('/api/workspaces/by-slug/odecor', headers=owner.headers)
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['id'] == workspace['id']
    assert data['role'] == 'OWNER'
    assert data['memberCount'] == 1
    assert data['postCount'] == 0

    resp = client.get('/api/workspaces/by-slug/odecor', headers=outsider.headers)
    assert resp.status_code == 404
    assert resp.get_json()['error'] == 'Workspace not found'


def test_get_workspace_includes_recent_posts(client, owner, create_workspace):
    workspace = create_workspace(owner)
    for title in ('One', 'Two'):
        client.post(f"/api/workspaces/{workspace['id']}/posts", json={'title': title}, headers=owner.headers)

    resp = client.get(f"/api/workspaces/{workspace['id']}", headers=owner.headers)
    data = resp.get_json()['data']
    assert data['_count'] == {'posts': 2}
    assert {p['title'] for p in data['posts']} == {'One', 'Two'}


def test_update_workspace_slug_rules(client, owner, outsider, create_workspace):
    workspace = create_workspace(owner)
    create_workspace(outsider, name='Taken')
    url = f"/api/workspaces/{workspace['id']}"

    resp = client.put(url, json={'slug': 'Bad Slug'}, headers=owner.headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Invalid slug format'

    resp = client.put(url, json={'slug': 'taken'}, headers=owner.headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Slug already taken'

    resp = client.put(url, json={'slug': 'odecor-home', 'description': 'New'}, headers=owner.headers)
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['slug'] == 'odecor-home'
    assert data['description'] == 'New'
    assert data['name'] == 'Odecor'


def test_update_workspace_domain_must_be_unique(client, owner, create_workspace):
    first = create_workspace(owner, name='First')
    second = create_workspace(owner, name='Second')

    resp = client.put(f"/api/workspaces/{first['id']}", json={'domain': 'shop.example.com'}, headers=owner.headers)
    assert resp.status_code == 200

    resp = client.put(f"/api/workspaces/{second['id']}", json={'domain': 'shop.example.com'}, headers=owner.headers)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Domain already in use'


def test_delete_is_soft(app, client, owner, create_workspace):
    workspace = create_workspace(owner)
    resp = client.delete(f"/api/workspaces/{workspace['id']}", headers=owner.headers)
    assert resp.get_json() == {'success': True, 'message': 'Workspace deleted successfully'}

    with app.app_context():
        row = db.session.get(Workspace, workspace['id'])
        assert row is not None
        assert row.deleted_at is not None

    resp = client.get(f"/api/workspaces/{workspace['id']}", headers=owner.headers)
    assert resp.status_code == 404
