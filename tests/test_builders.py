import pytest

from linked_orm import (
    DocumentNotFound,
    ManyBuilder,
    NestedManyBuilder,
    NestedOneBuilder,
    SingleBuilder,
    TooManyNestedAttributeRecords,
    UnknownAttributeError,
)

from tests.models import Author, Post

POSTS = Author.relations()["posts"]
AUTHOR = Post.relations()["author"]


def test_many_builder_inputs():
    existing = Post(title="Existing")
    query = Post.query().filter_by(title="X")

    assert ManyBuilder(POSTS, None).build() == []
    assert ManyBuilder(POSTS, query).build() is query

    single = ManyBuilder(POSTS, {"title": "One"}).build()
    assert isinstance(single, Post)
    assert single.title == "One"
    assert single.author_id is None

    built = ManyBuilder(POSTS, [existing, {"title": "Two"}]).build()
    assert built[0] is existing
    assert built[1].title == "Two"


def test_many_builder_rejects_unknown_fields():
    with pytest.raises(UnknownAttributeError):
        ManyBuilder(POSTS, {"headline": "One"}).build()


def test_builders_are_chosen_by_relation_kind():
    assert isinstance(POSTS.builder({}), ManyBuilder)
    assert isinstance(AUTHOR.builder({}), SingleBuilder)
    assert isinstance(POSTS.nested_builder([]), NestedManyBuilder)
    assert isinstance(AUTHOR.nested_builder({}), NestedOneBuilder)


def test_single_builder():
    author = Author(name="Ada")
    assert SingleBuilder(AUTHOR, author).build() is author
    assert SingleBuilder(AUTHOR, {"name": "Bob"}).build().name == "Bob"
    assert SingleBuilder(AUTHOR, None).build() is None


@pytest.mark.asyncio
async def test_nested_many_builder(ctx):
    author = Author(name="Ada")
    await author.save()
    renamed = await author.posts.create({"title": "Old"})
    removed = await author.posts.create({"title": "Gone"})

    attributes = {
        "0": {"title": "New"},
        "1": {"id": str(renamed.id), "title": "Renamed"},
        "2": {"id": removed.id, "_destroy": "1"},
    }
    builder = POSTS.nested_builder(attributes, {"allow_destroy": True})
    relation = await builder.build(author)

    assert [post.title for post in relation] == ["Renamed", "New"]
    assert relation[1].new_record
    assert relation[1].author is author
    assert removed.destroyed
    assert await Post.query().filter_by(id=removed.id).count() == 0


@pytest.mark.asyncio
async def test_nested_many_builder_without_allow_destroy(ctx):
    author = Author(name="Ada")
    await author.save()
    post = await author.posts.create({"title": "Stays"})

    await NestedManyBuilder(POSTS, [{"id": post.id, "_destroy": True, "body": "kept"}]).build(author)

    assert post in author.posts
    assert post.body == "kept"
    assert not post.destroyed


@pytest.mark.asyncio
async def test_nested_many_builder_options():
    author = Author(name="Ada")

    with pytest.raises(TooManyNestedAttributeRecords):
        await NestedManyBuilder(POSTS, [{}, {}, {}], {"limit": 2}).build(author)

    options = {"reject_if": lambda attrs: not attrs.get("title")}
    await NestedManyBuilder(POSTS, [{"title": ""}, {"title": "Kept"}], options).build(author)
    assert [post.title for post in author.posts] == ["Kept"]

    with pytest.raises(DocumentNotFound):
        await NestedManyBuilder(POSTS, [{"id": 404, "title": "Ghost"}]).build(author)


def test_nested_one_builder():
    post = Post(title="One")

    owner = NestedOneBuilder(AUTHOR, {"name": "Ada"}).build(post)
    assert post.author is owner
    assert owner.name == "Ada"

    same = NestedOneBuilder(AUTHOR, {"name": "Ada L."}).build(post)
    assert same is owner
    assert owner.name == "Ada L."

    assert NestedOneBuilder(AUTHOR, {"_destroy": "true"}, {"allow_destroy": True}).build(post) is None
    assert post.author is None
    assert post.author_id is None
