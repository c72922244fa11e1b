"""
Post CRUD and post delete cascade
"""

from conftest import create_comment, create_post, login, register


class TestCreatePost:

    def test_create_post(self, signed_in, db):
        user_client, user = signed_in('alice')

        response = create_post(
            user_client, user,
            photo='https://cdn.mail.com/cover.png',
            categories=['travel', 'food'],
        )

        assert response.status_code == 200
        post = response.get_json()
        assert post['title'] == 'Hello world'
        assert post['userId'] == user['_id']
        assert post['categories'] == ['travel', 'food']
        assert post['photo'].startswith('https://cdn.mail.com/cover.png')
        assert db.posts.count_documents({}) == 1

    def test_owner_must_exist(self, make_app):
        app = make_app(ENFORCE_OWNERSHIP=False)
        user_client = app.test_client()
        register(user_client, 'alice', 'alice@mail.com')
        user = login(user_client, 'alice@mail.com').get_json()

        response = create_post(user_client, dict(user, _id='64b7f0c2a1b2c3d4e5f60718'))

        assert response.status_code == 404
        assert response.get_json()['message'] == 'User not found'

    def test_cannot_post_as_someone_else(self, signed_in, db):
        alice_client, alice = signed_in('alice')
        _, bob = signed_in('bob')

        response = create_post(alice_client, bob)

        assert response.status_code == 403
        assert db.posts.count_documents({}) == 0

    def test_invalid_fields(self, signed_in):
        user_client, user = signed_in('alice')

        response = create_post(user_client, user, title='', userId='123', photo='not a url', categories='x')

        assert response.status_code == 400
        fields = {error['field'] for error in response.get_json()['errors']}
        assert {'title', 'userId', 'photo', 'categories'} <= fields


class TestUpdatePost:

    def test_update_post(self, signed_in):
        user_client, user = signed_in('alice')
        post = create_post(user_client, user).get_json()

        response = user_client.put(f"/api/posts/{post['_id']}", json={'title': 'Edited'})

        assert response.status_code == 200
        assert response.get_json()['title'] == 'Edited'
        assert response.get_json()['desc'] == 'First post'

    def test_update_ignores_owner_fields(self, signed_in):
        user_client, user = signed_in('alice')
        post = create_post(user_client, user).get_json()

        response = user_client.put(f"/api/posts/{post['_id']}", json={'desc': 'New', 'userId': 'someone'})

        assert response.get_json()['userId'] == user['_id']

    def test_update_missing_post(self, signed_in):
        user_client, _ = signed_in('alice')

        response = user_client.put('/api/posts/64b7f0c2a1b2c3d4e5f60718', json={'title': 'Edited'})

        assert response.status_code == 404

    def test_update_with_malformed_id(self, signed_in):
        user_client, _ = signed_in('alice')

        response = user_client.put('/api/posts/not-an-id', json={'title': 'Edited'})

        assert response.status_code == 400

    def test_other_user_cannot_update(self, signed_in):
        alice_client, alice = signed_in('alice')
        bob_client, _ = signed_in('bob')
        post = create_post(alice_client, alice).get_json()

        response = bob_client.put(f"/api/posts/{post['_id']}", json={'title': 'Hijacked'})

        assert response.status_code == 403


    def test_create_and_read_report_the_same_timestamps(self, client, signed_in):
        user_client, user = signed_in('alice')
        created = create_post(user_client, user).get_json()

        fetched = client.get(f"/api/posts/{created['_id']}").get_json()

        assert fetched['createdAt'] == created['createdAt']
        assert fetched['updatedAt'] == created['updatedAt']
        assert created['createdAt'].endswith('+00:00')

    def test_update_and_read_report_the_same_timestamp(self, client, signed_in):
        user_client, user = signed_in('alice')
        post = create_post(user_client, user).get_json()

        updated = user_client.put(f"/api/posts/{post['_id']}", json={'title': 'Edited'}).get_json()
        fetched = client.get(f"/api/posts/{post['_id']}").get_json()

        assert fetched['updatedAt'] == updated['updatedAt']
        assert fetched['createdAt'] == post['createdAt']


class TestDeletePost:

    def test_delete_removes_all_attached_comments(self, signed_in, db):
        alice_client, alice = signed_in('alice')
        bob_client, bob = signed_in('bob')
        post = create_post(alice_client, alice).get_json()
        other_post = create_post(alice_client, alice, title='Second').get_json()
        for _ in range(3):
            create_comment(bob_client, bob, post['_id'])
        create_comment(alice_client, alice, post['_id'])
        create_comment(bob_client, bob, other_post['_id'])

        response = alice_client.delete(f"/api/posts/{post['_id']}")

        assert response.status_code == 200
        assert response.get_json()['deleted'] == {'posts': 1, 'comments': 4}
        assert db.comments.count_documents({'postId': post['_id']}) == 0
        assert db.comments.count_documents({'postId': other_post['_id']}) == 1
        assert db.posts.count_documents({}) == 1

    def test_repeat_delete_is_not_found(self, signed_in):
        user_client, user = signed_in('alice')
        post = create_post(user_client, user).get_json()

        assert user_client.delete(f"/api/posts/{post['_id']}").status_code == 200
        assert user_client.delete(f"/api/posts/{post['_id']}").status_code == 404

    def test_other_user_cannot_delete(self, signed_in, db):
        alice_client, alice = signed_in('alice')
        bob_client, _ = signed_in('bob')
        post = create_post(alice_client, alice).get_json()

        assert bob_client.delete(f"/api/posts/{post['_id']}").status_code == 403
        assert db.posts.count_documents({}) == 1


class TestReadPosts:

    def test_get_post(self, client, signed_in):
        user_client, user = signed_in('alice')
        post = create_post(user_client, user).get_json()

        response = client.get(f"/api/posts/{post['_id']}")

        assert response.status_code == 200
        assert response.get_json()['_id'] == post['_id']

    def test_get_missing_post(self, client):
        assert client.get('/api/posts/64b7f0c2a1b2c3d4e5f60718').status_code == 404

    def test_search_matches_title_case_insensitively(self, client, signed_in):
        user_client, user = signed_in('alice')
        create_post(user_client, user, title='Trip to Lisbon')
        create_post(user_client, user, title='Cooking rice')

        titles = [post['title'] for post in client.get('/api/posts?search=lisbon').get_json()]
        assert titles == ['Trip to Lisbon']
        assert len(client.get('/api/posts').get_json()) == 2

    def test_search_treats_input_literally(self, client, signed_in):
        user_client, user = signed_in('alice')
        create_post(user_client, user, title='Cooking rice')

        assert client.get('/api/posts?search=.*').get_json() == []

    def test_posts_by_user(self, client, signed_in):
        alice_client, alice = signed_in('alice')
        bob_client, bob = signed_in('bob')
        create_post(alice_client, alice)
        create_post(bob_client, bob)

        posts = client.get(f"/api/posts/user/{alice['_id']}").get_json()

        assert [post['username'] for post in posts] == ['alice']
