"""
Read-side queries and the like toggle.

Listings return ``(rows, total)`` so the views only have to attach pagination
metadata; counts ride along in the same statement as the rows.
"""
import enum
from datetime import datetime, time

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from blogapi.errors import NotFound, ValidationError
from blogapi.extensions import db
from blogapi.models import MAX_ID, Blog, Category, Comment, Like, Status, User


class LikeState(enum.Enum):
    ABSENT = 'absent'
    PRESENT = 'present'


def get_or_404(model, ident, message):
    # Ids past the integer column range cannot exist
    instance = db.session.get(model, ident) if 0 < ident <= MAX_ID else None
    if instance is None:
        raise NotFound(message)
    return instance


def get_blog_or_404(blog_id):
    return get_or_404(Blog, blog_id, 'Blog not found')


def get_category_or_404(category_id):
    return get_or_404(Category, category_id, 'Category not found')


def parse_status_param(value):
    if value is None or value == '':
        return None
    try:
        return Status(value)
    except ValueError:
        raise ValidationError('Status must be ACTIVE or INACTIVE')


def parse_id_param(value, name):
    if value is None or value == '':
        return None
    message = f'{name} must be a positive integer'
    if not value.isdecimal():
        raise ValidationError(message)
    try:
        ident = int(value)
    except ValueError:
        raise ValidationError(message)
    if not 0 < ident <= MAX_ID:
        raise ValidationError(message)
    return ident


def parse_date_param(value, name, end_of_day=False):
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f'{name} must be an ISO 8601 date')
    if parsed.tzinfo is not None:
        parsed = (parsed - parsed.utcoffset()).replace(tzinfo=None)
    # A bare date as the upper bound covers the whole day
    if end_of_day and len(value) == 10:
        parsed = datetime.combine(parsed.date(), time.max)
    return parsed


# Blogs

def _like_count():
    return (select(func.count(Like.id))
            .where(Like.blog_id == Blog.id)
            .correlate(Blog)
            .scalar_subquery())


def _comment_count():
    return (select(func.count(Comment.id))
            .where(Comment.blog_id == Blog.id)
            .correlate(Blog)
            .scalar_subquery())


def blog_filters(status=None, category_id=None, search=None, created_by=None,
                 start=None, end=None):
    conditions = []
    if status is not None:
        conditions.append(Blog.status == status)
    if category_id is not None:
        conditions.append(Blog.category_id == category_id)
    if search:
        conditions.append(or_(Blog.title.contains(search, autoescape=True),
                              Blog.body.contains(search, autoescape=True)))
    if created_by is not None:
        conditions.append(Blog.created_by == created_by)
    if start is not None:
        conditions.append(Blog.created_at >= start)
    if end is not None:
        conditions.append(Blog.created_at <= end)
    return conditions


def list_blogs(conditions, page_request):
    total = db.session.query(func.count(Blog.id)).filter(*conditions).scalar()
    rows = (db.session.query(Blog, _like_count().label('like_count'),
                             _comment_count().label('comment_count'))
            .options(joinedload(Blog.category), joinedload(Blog.creator))
            .filter(*conditions)
            .order_by(Blog.created_at.desc(), Blog.id.desc())
            .offset(page_request.offset)
            .limit(page_request.limit)
            .all())
    return rows, total


def blog_engagement(blog):
    likes = (Like.query.options(joinedload(Like.user))
             .filter_by(blog_id=blog.id)
             .order_by(Like.created_at.desc(), Like.id.desc())
             .all())
    comments = (Comment.query.options(joinedload(Comment.user))
                .filter_by(blog_id=blog.id)
                .order_by(Comment.created_at.desc(), Comment.id.desc())
                .all())
    return likes, comments


def list_comments(blog_id, page_request):
    query = Comment.query.filter_by(blog_id=blog_id)
    total = query.count()
    comments = (query.options(joinedload(Comment.user))
                .order_by(Comment.created_at.desc(), Comment.id.desc())
                .offset(page_request.offset)
                .limit(page_request.limit)
                .all())
    return comments, total


def toggle_like(user_id, blog_id):
    """Flip the (user, blog) like and return the state it ends in."""
    removed = Like.query.filter_by(user_id=user_id, blog_id=blog_id).delete()
    if removed:
        db.session.commit()
        return LikeState.ABSENT

    db.session.add(Like(user_id=user_id, blog_id=blog_id))
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent request inserted the same pair first
        db.session.rollback()
    return LikeState.PRESENT


def like_count(blog_id):
    return Like.query.filter_by(blog_id=blog_id).count()


# Categories

def list_categories_with_stats(page_request, status=None):
    likes = (select(Blog.category_id, func.count(Like.id).label('total_likes'))
             .join(Like, Like.blog_id == Blog.id)
             .group_by(Blog.category_id)
             .subquery())
    comments = (select(Blog.category_id, func.count(Comment.id).label('total_comments'))
                .join(Comment, Comment.blog_id == Blog.id)
                .group_by(Blog.category_id)
                .subquery())

    conditions = [Category.status == status] if status is not None else []
    total = db.session.query(func.count(Category.id)).filter(*conditions).scalar()
    rows = (db.session.query(Category,
                             func.coalesce(likes.c.total_likes, 0),
                             func.coalesce(comments.c.total_comments, 0))
            .options(joinedload(Category.creator))
            .outerjoin(likes, likes.c.category_id == Category.id)
            .outerjoin(comments, comments.c.category_id == Category.id)
            .filter(*conditions)
            .order_by(Category.created_at.desc(), Category.id.desc())
            .offset(page_request.offset)
            .limit(page_request.limit)
            .all())
    return rows, total


def list_public_categories(page_request):
    blog_count = (select(func.count(Blog.id))
                  .where(Blog.category_id == Category.id, Blog.status == Status.ACTIVE)
                  .correlate(Category)
                  .scalar_subquery())
    conditions = [Category.status == Status.ACTIVE]
    total = db.session.query(func.count(Category.id)).filter(*conditions).scalar()
    rows = (db.session.query(Category, blog_count.label('blog_count'))
            .filter(*conditions)
            .order_by(Category.name.asc())
            .offset(page_request.offset)
            .limit(page_request.limit)
            .all())
    return rows, total


def category_name_taken(name, exclude_id=None):
    query = Category.query.filter(Category.name == name)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def category_has_blogs(category_id):
    return db.session.query(Blog.query.filter_by(category_id=category_id).exists()).scalar()


# Users

def list_users(page_request):
    total = db.session.query(func.count(User.id)).scalar()
    users = (User.query
             .order_by(User.created_at.desc(), User.id.desc())
             .offset(page_request.offset)
             .limit(page_request.limit)
             .all())
    return users, total
