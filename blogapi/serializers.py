# JSON projections of the ORM objects


def _iso(value):
    return value.isoformat() if value else None


def serialize_user(user, detailed=False):
    data = {
        'id': user.id,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'email': user.email,
        'role': user.role.value,
        'createdAt': _iso(user.created_at)
    }
    if detailed:
        data.update({
            'middleName': user.middle_name,
            'phoneNo': user.phone_no
        })
    return data


def serialize_person(user):
    return {
        'id': user.id,
        'firstName': user.first_name,
        'lastName': user.last_name
    }


def serialize_category(category, stats=None):
    data = {
        'id': category.id,
        'name': category.name,
        'status': category.status.value,
        'createdAt': _iso(category.created_at),
        'createdBy': category.created_by,
        'creator': serialize_person(category.creator)
    }
    if stats is not None:
        data['creatorName'] = category.creator.full_name
        data.update(stats)
    return data


def serialize_comment(comment):
    return {
        'id': comment.id,
        'content': comment.content,
        'blogId': comment.blog_id,
        'userId': comment.user_id,
        'createdAt': _iso(comment.created_at),
        'user': serialize_person(comment.user)
    }


def serialize_like(like):
    return {
        'id': like.id,
        'userId': like.user_id,
        'blogId': like.blog_id,
        'createdAt': _iso(like.created_at),
        'user': serialize_person(like.user)
    }


def serialize_blog(blog, like_count=None, comment_count=None):
    data = {
        'id': blog.id,
        'title': blog.title,
        'body': blog.body,
        'status': blog.status.value,
        'categoryId': blog.category_id,
        'createdBy': blog.created_by,
        'createdAt': _iso(blog.created_at),
        'updatedAt': _iso(blog.updated_at),
        'category': {'id': blog.category.id, 'name': blog.category.name},
        'creator': serialize_person(blog.creator)
    }
    if like_count is not None:
        data['likeCount'] = int(like_count)
    if comment_count is not None:
        data['commentCount'] = int(comment_count)
    return data


def serialize_blog_detail(blog, likes, comments, liked_by=None):
    data = serialize_blog(blog, like_count=len(likes), comment_count=len(comments))
    data['likes'] = [serialize_like(like) for like in likes]
    data['comments'] = [serialize_comment(comment) for comment in comments]
    if liked_by is not None:
        data['likedByMe'] = any(like.user_id == liked_by for like in likes)
    return data
