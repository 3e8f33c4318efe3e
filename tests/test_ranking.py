"""
Tests for the ranking view ordering contract.
"""
from bloglist_api import account_auth, blog_registry, ranking
from bloglist_api.models import Blog


def _seed(app, likes_by_title):
    """Create blogs in the given order and apply the given like counts."""
    with app.app_context():
        owner = account_auth.register_account('root', 'Rooty', 'root').account
        for title, likes in likes_by_title:
            blog_id = blog_registry.create_blog(owner, title, 'Author', 'url').blog.id
            for _ in range(likes):
                blog_registry.like_blog(owner, blog_id)


def _titles(blogs):
    return [b.title for b in blogs]


class TestOrderedBlogs:

    def test_empty(self, app):
        with app.app_context():
            assert ranking.ordered_blogs() == []

    def test_sorted_by_likes_descending(self, app):
        _seed(app, [('one', 1), ('three', 3), ('zero', 0), ('two', 2)])
        with app.app_context():
            assert _titles(ranking.ordered_blogs()) == ['three', 'two', 'one', 'zero']

    def test_ties_keep_creation_order(self, app):
        _seed(app, [('first', 2), ('second', 5), ('third', 2), ('fourth', 2)])
        with app.app_context():
            assert _titles(ranking.ordered_blogs()) == ['second', 'first', 'third', 'fourth']

    def test_like_is_reflected_on_next_read(self, app):
        _seed(app, [('first', 1), ('second', 0)])
        with app.app_context():
            assert _titles(ranking.ordered_blogs()) == ['first', 'second']

            caller = account_auth.resolve_caller(account_auth.authenticate('root', 'root').token)
            second = Blog.query.filter_by(title='second').one()
            blog_registry.like_blog(caller, second.id)
            blog_registry.like_blog(caller, second.id)

            assert _titles(ranking.ordered_blogs()) == ['second', 'first']

    def test_deleted_blog_disappears(self, app):
        _seed(app, [('keep', 0), ('drop', 4)])
        with app.app_context():
            caller = account_auth.resolve_caller(account_auth.authenticate('root', 'root').token)
            drop = Blog.query.filter_by(title='drop').one()
            blog_registry.delete_blog(caller, drop.id)

            assert _titles(ranking.ordered_blogs()) == ['keep']


class TestRankBlogs:

    def test_in_memory_ordering_matches(self):
        blogs = [
            Blog(id=1, title='a', likes=0),
            Blog(id=2, title='b', likes=7),
            Blog(id=3, title='c', likes=0),
            Blog(id=4, title='d', likes=7),
        ]
        assert _titles(ranking.rank_blogs(blogs)) == ['b', 'd', 'a', 'c']

    def test_does_not_mutate_input(self):
        blogs = [Blog(id=1, title='a', likes=0), Blog(id=2, title='b', likes=1)]
        ranking.rank_blogs(blogs)
        assert _titles(blogs) == ['a', 'b']
