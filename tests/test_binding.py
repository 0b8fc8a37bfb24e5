"""
In-memory behaviour of relations: binding, unbinding and substitution on
owners that were never saved, so no database is involved.
"""

import dataclasses
import gc

import pytest

from linked_orm import ManyBinding, ReferencedMany, RelationKind, RelationMetadata

from tests.models import Author, Post


def test_metadata_describes_declared_relation():
    metadata = Author.relations()["posts"]
    assert isinstance(metadata, RelationMetadata)
    assert metadata.kind is RelationKind.REFERENCES_MANY
    assert metadata.owner_class is Author
    assert metadata.klass is Post
    assert metadata.foreign_key == "author_id"
    assert metadata.inverse_name == "author"
    assert metadata.macro == "references_many"


def test_metadata_is_immutable():
    metadata = Author.relations()["posts"]
    with pytest.raises(dataclasses.FrozenInstanceError):
        metadata.foreign_key = "writer_id"


def test_metadata_is_shared_between_instances():
    assert Author().posts.metadata is Author().posts.metadata


def test_inverse_side_metadata():
    metadata = Post.relations()["author"]
    assert metadata.kind is RelationKind.REFERENCED_IN
    assert metadata.klass is Author
    assert metadata.stores_foreign_key is True


def test_class_level_traits():
    assert ReferencedMany.embedded() is False
    assert ReferencedMany.foreign_key_default() is None
    assert ReferencedMany.foreign_key_suffix() == "_id"
    assert ReferencedMany.macro() == "references_many"
    assert ReferencedMany.stores_foreign_key() is False


def test_binding_sets_and_clears_links():
    author = Author(name="Ada")
    author.id = 7
    posts = [Post(title="One"), Post(title="Two")]
    binding = ManyBinding(author, posts, Author.relations()["posts"])

    binding.bind()
    assert all(post.author_id == 7 for post in posts)
    assert all(post.author is author for post in posts)

    binding.unbind()
    assert all(post.author_id is None for post in posts)
    assert all(post.author is None for post in posts)


def test_inverse_pointer_does_not_keep_owner_alive():
    post = Post(title="Orphan")
    author = Author(name="Temp")
    post.author = author
    assert post.author is author

    del author
    gc.collect()
    assert post.author is None


def test_stale_inverse_pointer_is_ignored():
    author = Author(name="Ada")
    author.id = 3
    post = Post(title="One", author=author)
    post.author_id = 4
    assert post.author is None


def test_new_owner_starts_with_empty_loaded_target():
    author = Author(name="Ada")
    assert author.posts.is_loaded
    assert len(author.posts) == 0


@pytest.mark.asyncio
async def test_bind_then_unbind_clears_every_child():
    author = Author(name="Ada")
    posts = [Post(title="One"), Post(title="Two")]
    author.posts.target = posts

    await author.posts.bind()
    assert all(post.author is author for post in posts)

    result = await author.posts.unbind()
    assert result == []
    assert all(post.author_id is None and post.author is None for post in posts)


@pytest.mark.asyncio
async def test_build_appends_and_binds():
    author = Author(name="Ada")
    first = await author.posts.build({"title": "One"})
    second = await author.posts.create({"title": "Two"})

    assert list(author.posts) == [first, second]
    assert second.author is author
    assert second.new_record


@pytest.mark.asyncio
async def test_substitute_replaces_children():
    author = Author(name="Ada")
    kept = await author.posts.build({"title": "Kept"})
    dropped = await author.posts.build({"title": "Dropped"})
    fresh = Post(title="Fresh")

    relation = await author.posts.substitute([kept, fresh, {"title": "Built"}])

    assert relation is author.posts
    assert [post.title for post in relation] == ["Kept", "Fresh", "Built"]
    assert all(post.author is author for post in relation)
    assert dropped.author is None
    assert dropped.author_id is None


@pytest.mark.asyncio
async def test_substitute_none_empties_relation():
    author = Author(name="Ada")
    post = await author.posts.build({"title": "One"})

    await author.posts.substitute(None)

    assert author.posts.target == []
    assert post.author is None


@pytest.mark.asyncio
async def test_clear_returns_relation():
    author = Author(name="Ada")
    await author.posts.build({"title": "One"})
    relation = await author.posts.clear()
    assert relation is author.posts
    assert len(relation) == 0


def test_relation_cannot_be_assigned():
    author = Author(name="Ada")
    with pytest.raises(AttributeError):
        author.posts = []


@pytest.mark.asyncio
async def test_delete_removes_single_child():
    author = Author(name="Ada")
    post = await author.posts.build({"title": "One"})
    other = Post(title="Other")

    assert await author.posts.delete(post) is post
    assert await author.posts.delete(other) is None
    assert post.author is None
    assert post not in author.posts
