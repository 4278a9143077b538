# Routes for handling requests
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from blogapi import __version__
from blogapi.auth import auth_required, author_required, issue_token
from blogapi.errors import Conflict, Forbidden, NotFound, Unauthorized
from blogapi.extensions import bcrypt, db
from blogapi.forms import (BlogForm, CategoryForm, CommentForm, LoginForm, RegisterForm,
                           get_json_body)
from blogapi.models import Blog, Category, Comment, Status, User
from blogapi.pagination import pagination_meta, parse_pagination
from blogapi import queries
from blogapi.queries import LikeState
from blogapi.serializers import (serialize_blog, serialize_blog_detail, serialize_category,
                                 serialize_comment, serialize_user)

# Create blueprints for different route categories
main_bp = Blueprint('main', __name__)
auth_bp = Blueprint('auth', __name__)
blogs_bp = Blueprint('blogs', __name__)
categories_bp = Blueprint('categories', __name__)
public_bp = Blueprint('public', __name__)
users_bp = Blueprint('users', __name__)


def _blog_page(conditions):
    page_request = parse_pagination()
    rows, total = queries.list_blogs(conditions, page_request)
    return jsonify({
        "blogs": [serialize_blog(blog, like_count, comment_count)
                  for blog, like_count, comment_count in rows],
        "pagination": pagination_meta(page_request, total, 'totalBlogs')
    }), 200


def _check_owner(principal, entity, action, noun):
    if entity.created_by != principal.id:
        current_app.logger.warning('User %s tried to %s %s %s owned by %s',
                                   principal.id, action, noun, entity.id, entity.created_by)
        raise Forbidden(f"You can only {action} your own {noun}s")


@main_bp.route('/', methods=['GET'])
def welcome():
    """Welcome endpoint for the API"""
    return jsonify({"name": "blogapi", "version": __version__}), 200


@main_bp.route('/health', methods=['GET'])
def health():
    return jsonify({"status": "ok"}), 200


# Authentication Endpoints
@auth_bp.route('/register', methods=['POST'])
def register():
    """User Registration Endpoint"""
    data = RegisterForm(get_json_body()).validate()

    if User.query.filter_by(email=data['email']).first():
        raise Conflict("User with this email already exists")

    user = User(
        first_name=data['firstName'],
        middle_name=data['middleName'],
        last_name=data['lastName'],
        dob=data['dob'],
        email=data['email'],
        phone_no=data['phoneNo'],
        password_hash=bcrypt.generate_password_hash(data['password']).decode('utf-8'),
        role=data['role']
    )

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("User with this email already exists")

    current_app.logger.info('Registered user %s as %s', user.id, user.role.value)
    return jsonify({
        "message": "User registered successfully",
        "user": serialize_user(user),
        "token": issue_token(user)
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """User Login Endpoint"""
    data = LoginForm(get_json_body()).validate()

    user = User.query.filter_by(email=data['email']).first()

    # Unknown email and wrong password must look the same to the caller
    if user is None or not bcrypt.check_password_hash(user.password_hash, data['password']):
        current_app.logger.info('Failed login attempt')
        raise Unauthorized("Invalid credentials")

    return jsonify({
        "message": "Login successful",
        "user": serialize_user(user),
        "token": issue_token(user)
    }), 200


@auth_bp.route('/profile', methods=['GET'])
@auth_required()
def profile(principal):
    """Get current user's profile"""
    return jsonify({"user": principal.to_dict()}), 200


# Blog Endpoints
@blogs_bp.route('', methods=['POST'])
@author_required
def create_blog(principal):
    data = BlogForm(get_json_body(), require_status=False).validate()
    queries.get_category_or_404(data['categoryId'])

    blog = Blog(
        title=data['title'],
        body=data['body'],
        status=data['status'],
        category_id=data['categoryId'],
        created_by=principal.id
    )
    db.session.add(blog)
    db.session.commit()

    return jsonify({
        "message": "Blog created successfully",
        "blog": serialize_blog(blog, like_count=0, comment_count=0)
    }), 201


@blogs_bp.route('', methods=['GET'])
@auth_required()
def get_blogs(principal):
    status = queries.parse_status_param(request.args.get('status')) or Status.ACTIVE
    conditions = queries.blog_filters(
        status=status,
        category_id=queries.parse_id_param(request.args.get('categoryId'), 'categoryId'),
        search=request.args.get('search')
    )
    return _blog_page(conditions)


@blogs_bp.route('/author/my-blogs', methods=['GET'])
@author_required
def get_my_blogs(principal):
    conditions = queries.blog_filters(
        status=queries.parse_status_param(request.args.get('status')),
        created_by=principal.id,
        start=queries.parse_date_param(request.args.get('startDate'), 'startDate'),
        end=queries.parse_date_param(request.args.get('endDate'), 'endDate', end_of_day=True)
    )
    return _blog_page(conditions)


@blogs_bp.route('/<int:blog_id>', methods=['GET'])
@auth_required()
def get_blog(principal, blog_id):
    blog = queries.get_blog_or_404(blog_id)
    likes, comments = queries.blog_engagement(blog)
    return jsonify({"blog": serialize_blog_detail(blog, likes, comments, liked_by=principal.id)}), 200


@blogs_bp.route('/<int:blog_id>', methods=['PUT'])
@author_required
def update_blog(principal, blog_id):
    data = BlogForm(get_json_body()).validate()

    blog = queries.get_blog_or_404(blog_id)
    _check_owner(principal, blog, 'update', 'blog')
    queries.get_category_or_404(data['categoryId'])

    blog.title = data['title']
    blog.body = data['body']
    blog.category_id = data['categoryId']
    blog.status = data['status']
    db.session.commit()

    return jsonify({
        "message": "Blog updated successfully",
        "blog": serialize_blog(blog, like_count=blog.likes.count(),
                               comment_count=blog.comments.count())
    }), 200


@blogs_bp.route('/<int:blog_id>', methods=['DELETE'])
@author_required
def delete_blog(principal, blog_id):
    blog = queries.get_blog_or_404(blog_id)
    _check_owner(principal, blog, 'delete', 'blog')

    db.session.delete(blog)
    db.session.commit()

    current_app.logger.info('User %s deleted blog %s', principal.id, blog_id)
    return jsonify({"message": "Blog deleted successfully"}), 200


@blogs_bp.route('/<int:blog_id>/like', methods=['POST'])
@auth_required()
def toggle_like(principal, blog_id):
    queries.get_blog_or_404(blog_id)

    state = queries.toggle_like(principal.id, blog_id)
    liked = state is LikeState.PRESENT
    return jsonify({
        "message": "Blog liked successfully" if liked else "Blog unliked successfully",
        "liked": liked,
        "likeCount": queries.like_count(blog_id)
    }), 201 if liked else 200


@blogs_bp.route('/<int:blog_id>/comments', methods=['POST'])
@auth_required()
def add_comment(principal, blog_id):
    data = CommentForm(get_json_body()).validate()
    queries.get_blog_or_404(blog_id)

    comment = Comment(content=data['content'], user_id=principal.id, blog_id=blog_id)
    db.session.add(comment)
    db.session.commit()

    return jsonify({
        "message": "Comment added successfully",
        "comment": serialize_comment(comment)
    }), 201


@blogs_bp.route('/<int:blog_id>/comments', methods=['GET'])
@auth_required()
def get_comments(principal, blog_id):
    queries.get_blog_or_404(blog_id)

    page_request = parse_pagination()
    comments, total = queries.list_comments(blog_id, page_request)
    return jsonify({
        "comments": [serialize_comment(comment) for comment in comments],
        "pagination": pagination_meta(page_request, total, 'totalComments')
    }), 200


# Category Endpoints
@categories_bp.route('', methods=['POST'])
@author_required
def create_category(principal):
    data = CategoryForm(get_json_body()).validate()

    if queries.category_name_taken(data['name']):
        raise Conflict("Category with this name already exists")

    category = Category(name=data['name'], status=data['status'], created_by=principal.id)
    try:
        db.session.add(category)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Category with this name already exists")

    return jsonify({
        "message": "Category created successfully",
        "category": serialize_category(category)
    }), 201


@categories_bp.route('', methods=['GET'])
@auth_required()
def get_categories(principal):
    page_request = parse_pagination()
    status = queries.parse_status_param(request.args.get('status'))
    rows, total = queries.list_categories_with_stats(page_request, status=status)
    return jsonify({
        "categories": [
            serialize_category(category, stats={
                "totalLikes": int(total_likes),
                "totalComments": int(total_comments)
            })
            for category, total_likes, total_comments in rows
        ],
        "pagination": pagination_meta(page_request, total, 'totalCategories')
    }), 200


@categories_bp.route('/<int:category_id>', methods=['GET'])
@auth_required()
def get_category(principal, category_id):
    category = queries.get_category_or_404(category_id)
    return jsonify({"category": serialize_category(category)}), 200


@categories_bp.route('/<int:category_id>', methods=['PUT'])
@author_required
def update_category(principal, category_id):
    data = CategoryForm(get_json_body()).validate()

    category = queries.get_category_or_404(category_id)
    _check_owner(principal, category, 'update', 'category')

    if queries.category_name_taken(data['name'], exclude_id=category.id):
        raise Conflict("Category with this name already exists")

    category.name = data['name']
    category.status = data['status']
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict("Category with this name already exists")

    return jsonify({
        "message": "Category updated successfully",
        "category": serialize_category(category)
    }), 200


@categories_bp.route('/<int:category_id>', methods=['DELETE'])
@author_required
def delete_category(principal, category_id):
    category = queries.get_category_or_404(category_id)
    _check_owner(principal, category, 'delete', 'category')

    message = "Cannot delete category that has blogs. Please delete or move the blogs first."
    if queries.category_has_blogs(category.id):
        raise Conflict(message)

    try:
        db.session.delete(category)
        db.session.commit()
    except IntegrityError:
        # A blog was filed under the category after the check above
        db.session.rollback()
        raise Conflict(message)

    current_app.logger.info('User %s deleted category %s', principal.id, category_id)
    return jsonify({"message": "Category deleted successfully"}), 200


# Public Endpoints
@public_bp.route('/blogs', methods=['GET'])
def get_public_blogs():
    conditions = queries.blog_filters(
        status=Status.ACTIVE,
        category_id=queries.parse_id_param(request.args.get('categoryId'), 'categoryId'),
        search=request.args.get('search')
    )
    return _blog_page(conditions)


@public_bp.route('/blogs/<int:blog_id>', methods=['GET'])
def get_public_blog(blog_id):
    blog = queries.get_blog_or_404(blog_id)
    if blog.status is not Status.ACTIVE:
        raise NotFound("Blog not found")

    likes, comments = queries.blog_engagement(blog)
    return jsonify({"blog": serialize_blog_detail(blog, likes, comments)}), 200


@public_bp.route('/categories', methods=['GET'])
def get_public_categories():
    page_request = parse_pagination()
    rows, total = queries.list_public_categories(page_request)
    return jsonify({
        "categories": [
            {"id": category.id, "name": category.name, "blogCount": int(blog_count)}
            for category, blog_count in rows
        ],
        "pagination": pagination_meta(page_request, total, 'totalCategories')
    }), 200


# User Endpoints
@users_bp.route('', methods=['GET'])
@auth_required()
def get_users(principal):
    page_request = parse_pagination()
    users, total = queries.list_users(page_request)
    return jsonify({
        "users": [serialize_user(user, detailed=True) for user in users],
        "pagination": pagination_meta(page_request, total, 'totalUsers')
    }), 200


@users_bp.route('/<int:user_id>', methods=['GET'])
@auth_required()
def get_user(principal, user_id):
    user = queries.get_or_404(User, user_id, "User not found")
    return jsonify({"user": serialize_user(user, detailed=True)}), 200
