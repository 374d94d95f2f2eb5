import pytest

from naath.crud import slugify


def article_body(**overrides):
    body = {
        'title': 'The Dinka Cattle Camp',
        'content': 'Life in the wet season camps.',
        'excerpt': 'Wet season life',
        'tags': ['pastoralism', 'dinka'],
        'featuredImageUrl': 'https://cdn.example.com/camp.jpg',
    }
    body.update(overrides)
    return body


def test_slugify():
    assert slugify('The Dinka Cattle Camp') == 'the-dinka-cattle-camp'
    assert slugify('  Songs, Dances & Rites!  ') == 'songs-dances-rites'
    assert slugify('***').startswith('article-')


@pytest.mark.asyncio
async def test_create_publish_and_read(client, contributor, member):
    res = await client.post('/api/articles', json=article_body(), headers=contributor['headers'])
    assert res.status_code == 201, res.text
    article = res.json()
    assert article['slug'] == 'the-dinka-cattle-camp'
    assert article['status'] == 'draft'
    assert article['authorId'] == contributor['id']
    assert article['publishedAt'] is None

    # drafts are invisible to the public
    res = await client.get(f"/api/articles/{article['slug']}")
    assert res.status_code == 404
    res = await client.get('/api/articles/drafts', headers=contributor['headers'])
    assert res.json()['count'] == 1

    res = await client.put(f"/api/articles/{article['id']}", json={'status': 'published'}, headers=contributor['headers'])
    assert res.status_code == 200
    assert res.json()['status'] == 'published'
    assert res.json()['publishedAt'] is not None

    res = await client.get(f"/api/articles/{article['slug']}")
    assert res.status_code == 200
    detail = res.json()
    assert detail['viewCount'] == 1
    assert detail['commentsCount'] == 0
    assert detail['author']['id'] == contributor['id']

    res = await client.get(f"/api/articles/{article['slug']}")
    assert res.json()['viewCount'] == 2

    res = await client.get('/api/articles/drafts', headers=member['headers'])
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_create_requires_contributor(client, member):
    res = await client.post('/api/articles', json=article_body(), headers=member['headers'])
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_create_validation(client, contributor):
    res = await client.post('/api/articles', json=article_body(featuredImageUrl='not a url'), headers=contributor['headers'])
    assert res.status_code == 400
    assert res.json()['details'][0]['loc'][-1] == 'featuredImageUrl'

    res = await client.post('/api/articles', json=article_body(title=''), headers=contributor['headers'])
    assert res.status_code == 400

    assert (await client.post('/api/articles', json=article_body(), headers=contributor['headers'])).status_code == 201
    res = await client.post('/api/articles', json=article_body(), headers=contributor['headers'])
    assert res.status_code == 400
    assert res.json()['error'] == 'ValidationFailed'


@pytest.mark.asyncio
async def test_update_allow_list_and_nulls(client, contributor, published_article):
    url = f'/api/articles/{published_article.id}'

    res = await client.put(url, json={'viewCount': 9000, 'authorId': 1}, headers=contributor['headers'])
    assert res.status_code == 400
    assert res.json()['message'] == 'Please provide at least one field to update'

    res = await client.put(url, json={}, headers=contributor['headers'])
    assert res.status_code == 400

    res = await client.put(url, json={'title': None}, headers=contributor['headers'])
    assert res.status_code == 400
    assert 'title' in res.json()['message']

    res = await client.put(url, json={'excerpt': None, 'tags': ['oral-history']}, headers=contributor['headers'])
    assert res.status_code == 200
    body = res.json()
    assert body['excerpt'] is None
    assert body['tags'] == ['oral-history']
    assert body['title'] == published_article.title
    assert body['viewCount'] == 0

    res = await client.put(url, json={'status': 'lost'}, headers=contributor['headers'])
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_update_and_delete_ownership(client, contributor, make_user, admin, published_article):
    stranger = await make_user('contributor')
    url = f'/api/articles/{published_article.id}'

    res = await client.put(url, json={'title': 'Hijacked'}, headers=stranger['headers'])
    assert res.status_code == 403
    res = await client.delete(url, headers=stranger['headers'])
    assert res.status_code == 403

    res = await client.put(url, json={'title': 'Edited by admin'}, headers=admin['headers'])
    assert res.status_code == 200

    res = await client.put('/api/articles/9999', json={'title': 'x'}, headers=admin['headers'])
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_delete_removes_comments(client, contributor, member, admin, published_article):
    res = await client.post('/api/comments', json={'content': 'Nice', 'articleId': published_article.id},
                            headers=admin['headers'])
    comment_id = res.json()['comment']['id']
    await client.post(f'/api/comments/{comment_id}/like', headers=member['headers'])
    await client.post('/api/comments', json={'content': 'Reply', 'articleId': published_article.id,
                                             'parentId': comment_id}, headers=admin['headers'])

    res = await client.delete(f'/api/articles/{published_article.id}', headers=contributor['headers'])
    assert res.status_code == 200
    assert res.json() == {'message': 'Article deleted successfully'}

    res = await client.get(f'/api/articles/{published_article.id}/comments')
    assert res.status_code == 404
    res = await client.post(f'/api/comments/{comment_id}/like', headers=member['headers'])
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_list_filters_and_sorts(client, contributor, make_user, make_article):
    other = await make_user('contributor')
    await make_article(contributor['id'], title='Beads and Bangles')
    await make_article(contributor['id'], title='Arrow Heads')
    await make_article(other['id'], title='Clay Pots')
    await make_article(other['id'], title='Hidden Draft', status='draft')

    res = await client.get('/api/articles', params={'sort': 'title'})
    assert res.status_code == 200
    body = res.json()
    assert [a['title'] for a in body['articles']] == ['Arrow Heads', 'Beads and Bangles', 'Clay Pots']
    assert body['pagination']['totalArticles'] == 3
    assert body['articles'][0]['author']['id'] == contributor['id']

    res = await client.get('/api/articles', params={'author': other['id']})
    assert [a['title'] for a in res.json()['articles']] == ['Clay Pots']

    res = await client.get('/api/articles', params={'search': 'bangles'})
    assert [a['title'] for a in res.json()['articles']] == ['Beads and Bangles']

    res = await client.get('/api/articles', params={'limit': 2})
    pagination = res.json()['pagination']
    assert len(res.json()['articles']) == 2
    assert pagination['hasNextPage'] is True
    assert pagination['totalPages'] == 2

    res = await client.get('/api/articles', params={'sort': 'popular'})
    assert res.status_code == 400
