from datetime import datetime

import pytest

from blogapi.extensions import db
from blogapi.models import Blog


class TestCreateBlog:

    def test_author_creates_blog(self, client, author, make_category):
        _, headers = author
        category = make_category(headers, name='Tech')

        response = client.post('/blogs', headers=headers, json={
            'title': '  Hello  ',
            'body': 'This body is long enough.',
            'categoryId': category['id']
        })

        assert response.status_code == 201
        blog = response.get_json()['blog']
        assert blog['title'] == 'Hello'
        assert blog['status'] == 'ACTIVE'
        assert blog['category'] == {'id': category['id'], 'name': 'Tech'}
        assert blog['likeCount'] == 0
        assert blog['commentCount'] == 0

    def test_reader_is_forbidden(self, client, author, reader, make_category):
        category = make_category(author[1])

        response = client.post('/blogs', headers=reader[1], json={
            'title': 'Title', 'body': 'This body is long enough.',
            'categoryId': category['id'], 'status': 'ACTIVE'})

        assert response.status_code == 403
        assert response.get_json() == {'error': 'Author access required'}

    def test_unknown_category(self, client, author):
        response = client.post('/blogs', headers=author[1], json={
            'title': 'Title', 'body': 'This body is long enough.',
            'categoryId': 999, 'status': 'ACTIVE'})

        assert response.status_code == 404
        assert response.get_json() == {'error': 'Category not found'}

    @pytest.mark.parametrize('category_id', ['²', '٣x', str(10 ** 20), 10 ** 20, True])
    def test_malformed_category_id(self, client, author, category_id):
        response = client.post('/blogs', headers=author[1], json={
            'title': 'Title', 'body': 'This body is long enough.',
            'categoryId': category_id, 'status': 'ACTIVE'})

        assert response.status_code == 400
        assert response.get_json()['details'] == [
            {'field': 'categoryId', 'message': 'Valid category ID is required'}]

    def test_short_body(self, client, author, make_category):
        category = make_category(author[1])

        response = client.post('/blogs', headers=author[1], json={
            'title': 'Title', 'body': 'too short', 'categoryId': category['id']})

        assert response.status_code == 400
        assert response.get_json()['details'] == [
            {'field': 'body', 'message': 'Blog body must be at least 10 characters'}]

    def test_invalid_status(self, client, author, make_category):
        category = make_category(author[1])

        response = client.post('/blogs', headers=author[1], json={
            'title': 'Title', 'body': 'This body is long enough.',
            'categoryId': category['id'], 'status': 'DRAFT'})

        assert response.status_code == 400

    def test_requires_token(self, client):
        assert client.post('/blogs', json={}).status_code == 401


class TestUpdateAndDeleteBlog:

    def test_owner_updates_blog(self, client, author, make_category, make_blog):
        headers = author[1]
        first = make_category(headers, name='First')
        second = make_category(headers, name='Second')
        blog = make_blog(headers, first['id'])

        response = client.put(f"/blogs/{blog['id']}", headers=headers, json={
            'title': 'Updated', 'body': 'Updated body text.',
            'categoryId': second['id'], 'status': 'INACTIVE'})

        assert response.status_code == 200
        updated = response.get_json()['blog']
        assert updated['title'] == 'Updated'
        assert updated['status'] == 'INACTIVE'
        assert updated['category']['name'] == 'Second'

    def test_non_owner_gets_forbidden_not_not_found(self, client, register, make_category,
                                                     make_blog):
        _, owner = register('author')
        _, other = register('author')
        category = make_category(owner)
        blog = make_blog(owner, category['id'])
        payload = {'title': 'Mine now', 'body': 'Hijacked body text.',
                   'categoryId': category['id'], 'status': 'ACTIVE'}

        update = client.put(f"/blogs/{blog['id']}", headers=other, json=payload)
        delete = client.delete(f"/blogs/{blog['id']}", headers=other)
        missing = client.put('/blogs/999', headers=other, json=payload)

        assert update.status_code == 403
        assert update.get_json() == {'error': 'You can only update your own blogs'}
        assert delete.status_code == 403
        assert missing.status_code == 404

    def test_update_requires_status(self, client, author, make_category, make_blog):
        headers = author[1]
        category = make_category(headers)
        blog = make_blog(headers, category['id'])

        response = client.put(f"/blogs/{blog['id']}", headers=headers, json={
            'title': 'Updated', 'body': 'Updated body text.', 'categoryId': category['id']})

        assert response.status_code == 400

    def test_delete_removes_likes_and_comments(self, client, author, reader, make_category,
                                               make_blog):
        headers = author[1]
        category = make_category(headers)
        blog = make_blog(headers, category['id'])
        client.post(f"/blogs/{blog['id']}/like", headers=reader[1])
        client.post(f"/blogs/{blog['id']}/comments", headers=reader[1], json={'content': 'Nice'})

        response = client.delete(f"/blogs/{blog['id']}", headers=headers)

        assert response.status_code == 200
        assert client.get(f"/blogs/{blog['id']}", headers=headers).status_code == 404


class TestListBlogs:

    def test_defaults_to_active_blogs(self, client, author, make_category, make_blog):
        headers = author[1]
        category = make_category(headers)
        make_blog(headers, category['id'], title='Visible')
        make_blog(headers, category['id'], title='Hidden', status='INACTIVE')

        body = client.get('/blogs', headers=headers).get_json()
        assert [blog['title'] for blog in body['blogs']] == ['Visible']

        body = client.get('/blogs?status=INACTIVE', headers=headers).get_json()
        assert [blog['title'] for blog in body['blogs']] == ['Hidden']

    def test_filters_by_category_and_search(self, client, author, make_category, make_blog):
        headers = author[1]
        python = make_category(headers, name='Python')
        rust = make_category(headers, name='Rust')
        make_blog(headers, python['id'], title='Flask tips', body='Blueprints and factories.')
        make_blog(headers, python['id'], title='Typing', body='Protocols in Flask apps.')
        make_blog(headers, rust['id'], title='Ownership', body='Borrowing explained well.')

        by_category = client.get(f"/blogs?categoryId={rust['id']}", headers=headers).get_json()
        assert [blog['title'] for blog in by_category['blogs']] == ['Ownership']

        by_search = client.get('/blogs?search=Flask', headers=headers).get_json()
        assert sorted(blog['title'] for blog in by_search['blogs']) == ['Flask tips', 'Typing']

        case_sensitive = client.get('/blogs?search=flask', headers=headers).get_json()
        assert case_sensitive['blogs'] == []

    def test_invalid_filters_are_rejected(self, client, author):
        headers = author[1]
        assert client.get('/blogs?status=DRAFT', headers=headers).status_code == 400
        assert client.get('/blogs?categoryId=abc', headers=headers).status_code == 400

    @pytest.mark.parametrize('category_id', ['²', '-1', '0', str(10 ** 20)])
    def test_out_of_range_category_filter(self, client, author, category_id):
        response = client.get('/blogs', headers=author[1], query_string={'categoryId': category_id})

        assert response.status_code == 400
        assert response.get_json() == {'error': 'categoryId must be a positive integer'}

    def test_pagination(self, client, author, make_category, make_blog):
        headers = author[1]
        category = make_category(headers)
        for _ in range(12):
            make_blog(headers, category['id'])

        body = client.get('/blogs?page=2&limit=5', headers=headers).get_json()

        assert len(body['blogs']) == 5
        assert body['pagination'] == {
            'currentPage': 2,
            'totalPages': 3,
            'totalBlogs': 12,
            'hasNextPage': True,
            'hasPrevPage': True
        }

    def test_empty_listing(self, client, author):
        body = client.get('/blogs?page=1', headers=author[1]).get_json()

        assert body['blogs'] == []
        assert body['pagination']['totalPages'] == 0

    def test_huge_page_and_limit_are_clamped(self, client, author, make_category, make_blog):
        headers = author[1]
        make_blog(headers, make_category(headers)['id'])

        far = client.get('/blogs', headers=headers,
                         query_string={'page': str(10 ** 20), 'limit': str(10 ** 20)})

        assert far.status_code == 200
        body = far.get_json()
        assert body['blogs'] == []
        assert body['pagination']['currentPage'] == 100000
        assert body['pagination']['totalPages'] == 1
        assert body['pagination']['hasNextPage'] is False
        assert body['pagination']['hasPrevPage'] is False


class TestMyBlogs:

    def test_lists_only_own_blogs_in_date_range(self, app, client, register, make_category,
                                                make_blog):
        _, mine = register('author')
        _, theirs = register('author')
        category = make_category(mine)
        old = make_blog(mine, category['id'], title='Old')
        make_blog(mine, category['id'], title='New', status='INACTIVE')
        make_blog(theirs, category['id'], title='Not mine')

        db.session.get(Blog, old['id']).created_at = datetime(2020, 1, 15, 12, 0)
        db.session.commit()

        all_mine = client.get('/blogs/author/my-blogs', headers=mine).get_json()
        assert sorted(blog['title'] for blog in all_mine['blogs']) == ['New', 'Old']

        in_range = client.get('/blogs/author/my-blogs?startDate=2020-01-01&endDate=2020-01-15',
                              headers=mine).get_json()
        assert [blog['title'] for blog in in_range['blogs']] == ['Old']

        since = client.get('/blogs/author/my-blogs?startDate=2021-01-01',
                           headers=mine).get_json()
        assert [blog['title'] for blog in since['blogs']] == ['New']

    def test_reader_is_forbidden(self, client, reader):
        assert client.get('/blogs/author/my-blogs', headers=reader[1]).status_code == 403

    def test_invalid_date(self, client, author):
        response = client.get('/blogs/author/my-blogs?startDate=yesterday', headers=author[1])
        assert response.status_code == 400


class TestBlogDetail:

    def test_detail_includes_engagement(self, client, author, reader, make_category, make_blog):
        headers = author[1]
        category = make_category(headers)
        blog = make_blog(headers, category['id'])
        client.post(f"/blogs/{blog['id']}/like", headers=reader[1])
        client.post(f"/blogs/{blog['id']}/comments", headers=reader[1], json={'content': 'Hi'})

        as_reader = client.get(f"/blogs/{blog['id']}", headers=reader[1]).get_json()['blog']
        as_author = client.get(f"/blogs/{blog['id']}", headers=headers).get_json()['blog']

        assert as_reader['likeCount'] == 1
        assert as_reader['commentCount'] == 1
        assert as_reader['comments'][0]['content'] == 'Hi'
        assert as_reader['likes'][0]['userId'] == reader[0]['id']
        assert as_reader['likedByMe'] is True
        assert as_author['likedByMe'] is False

    def test_missing_blog(self, client, author):
        response = client.get('/blogs/12345', headers=author[1])
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Blog not found'}

    def test_id_beyond_integer_range(self, client, author):
        response = client.get(f'/blogs/{10 ** 20}', headers=author[1])
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Blog not found'}
