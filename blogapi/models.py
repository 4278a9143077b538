# Database models
import enum
from datetime import datetime, timezone

from blogapi.extensions import db

# Largest primary key a 64-bit signed integer column can hold
MAX_ID = 2 ** 63 - 1


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Role(enum.Enum):
    AUTHOR = 'author'
    READER = 'reader'


class Status(enum.Enum):
    ACTIVE = 'ACTIVE'
    INACTIVE = 'INACTIVE'


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    middle_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100), nullable=False)
    dob = db.Column(db.Date, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    phone_no = db.Column(db.String(30), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(Role, name='user_role', values_callable=_enum_values), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    categories = db.relationship('Category', back_populates='creator', lazy='dynamic')
    blogs = db.relationship('Blog', back_populates='creator', lazy='dynamic')
    comments = db.relationship('Comment', back_populates='user', lazy='dynamic')
    likes = db.relationship('Like', back_populates='user', lazy='dynamic')

    @property
    def full_name(self):
        return f'{self.first_name} {self.last_name}'.strip()

    def __repr__(self):
        return f'<User {self.email} ({self.role.value})>'


class Category(db.Model):
    __tablename__ = 'categories'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    status = db.Column(db.Enum(Status, name='category_status', values_callable=_enum_values),
                       nullable=False, default=Status.ACTIVE)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    creator = db.relationship('User', back_populates='categories')
    blogs = db.relationship('Blog', back_populates='category', lazy='dynamic',
                            passive_deletes='all')

    def __repr__(self):
        return f'<Category {self.name}>'


class Blog(db.Model):
    __tablename__ = 'blogs'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    body = db.Column(db.Text, nullable=False)
    status = db.Column(db.Enum(Status, name='blog_status', values_callable=_enum_values),
                       nullable=False, default=Status.ACTIVE, index=True)
    # RESTRICT keeps a category from being dropped underneath its blogs
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id', ondelete='RESTRICT'),
                            nullable=False, index=True)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    category = db.relationship('Category', back_populates='blogs')
    creator = db.relationship('User', back_populates='blogs')
    comments = db.relationship('Comment', back_populates='blog', lazy='dynamic',
                               cascade='all, delete-orphan')
    likes = db.relationship('Like', back_populates='blog', lazy='dynamic',
                            cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Blog {self.id} {self.title!r}>'


class Like(db.Model):
    __tablename__ = 'likes'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    blog_id = db.Column(db.Integer, db.ForeignKey('blogs.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    user = db.relationship('User', back_populates='likes')
    blog = db.relationship('Blog', back_populates='likes')

    __table_args__ = (db.UniqueConstraint('user_id', 'blog_id', name='uq_like_user_blog'),)


class Comment(db.Model):
    __tablename__ = 'comments'
    id = db.Column(db.Integer, primary_key=True)
    content = db.Column(db.Text, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    blog_id = db.Column(db.Integer, db.ForeignKey('blogs.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    user = db.relationship('User', back_populates='comments')
    blog = db.relationship('Blog', back_populates='comments')
