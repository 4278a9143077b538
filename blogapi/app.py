# Main Flask app
import logging
from datetime import date

import click
from flask import Flask

from blogapi.config import config
from blogapi.errors import register_error_handlers, register_jwt_callbacks
from blogapi.extensions import bcrypt, db, jwt


def create_app(config_name='default'):
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)

    register_jwt_callbacks()
    register_error_handlers(app)
    register_blueprints(app)
    register_commands(app)

    return app


def register_blueprints(app):
    from blogapi.routes import auth_bp, blogs_bp, categories_bp, main_bp, public_bp, users_bp

    app.register_blueprint(main_bp, url_prefix='/')
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(blogs_bp, url_prefix='/blogs')
    app.register_blueprint(categories_bp, url_prefix='/categories')
    app.register_blueprint(public_bp, url_prefix='/public')
    app.register_blueprint(users_bp, url_prefix='/users')


def register_commands(app):
    @app.cli.command('init-db')
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo('Database tables created.')

    @app.cli.command('seed')
    @click.option('--password', default='password123', show_default=True,
                  help='Password given to the demo accounts.')
    def seed(password):
        """Insert a demo author, reader, categories, blogs, a like and a comment."""
        seed_demo_data(password)
        click.echo('Demo data inserted.')


def seed_demo_data(password):
    from blogapi.models import Blog, Category, Comment, Like, Role, Status, User

    db.create_all()
    password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    author = User(first_name='Suman', last_name='Sharma', dob=date(1992, 3, 15),
                  email='suman.sharma@example.com', phone_no='9800000001',
                  password_hash=password_hash, role=Role.AUTHOR)
    reader = User(first_name='Maya', last_name='Kandel', dob=date(1996, 7, 21),
                  email='maya.kandel@example.com', phone_no='9800000002',
                  password_hash=password_hash, role=Role.READER)
    technology = Category(name='Technology', status=Status.ACTIVE, creator=author)
    lifestyle = Category(name='Lifestyle', status=Status.ACTIVE, creator=author)
    first_blog = Blog(title='Technology in Nepal',
                      body='Nepal has made notable progress in technology over recent years.',
                      status=Status.ACTIVE, category=technology, creator=author)
    second_blog = Blog(title='Healthy Living Tips',
                       body='Regular exercise and a balanced diet are the basis of a healthy life.',
                       status=Status.ACTIVE, category=lifestyle, creator=author)

    db.session.add_all([author, reader, technology, lifestyle, first_blog, second_blog])
    db.session.add(Like(user=reader, blog=first_blog))
    db.session.add(Comment(content='Great article!', user=reader, blog=first_blog))
    db.session.commit()
