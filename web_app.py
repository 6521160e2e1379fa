#!/usr/bin/env python3
"""
Flask API server for trendfeed.
Serves ingested articles, comments, trending tags, simple recommendations and
user preferences straight from the Supabase store.
"""

from flask import Flask, jsonify, request
from werkzeug.middleware.proxy_fix import ProxyFix
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_caching import Cache
from flask_compress import Compress
import logging
from collections import Counter
from datetime import datetime, timezone
from functools import wraps
import os
from typing import Any, Dict, List, Optional
from dotenv import load_dotenv

from cors_config import configure_cors
from trendfeed.storage.supabase_store import StoreError, SupabaseStore

# Load environment variables from .env file
load_dotenv()

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ANONYMOUS_USER_NAME = '匿名'
DEFAULT_AVATAR = '😊'
MAX_PAGE_SIZE = 100
MAX_OFFSET = 10000

SUPABASE_URL = os.environ.get('SUPABASE_URL')
SUPABASE_KEY = os.environ.get('SUPABASE_SERVICE_ROLE_KEY') or os.environ.get('SUPABASE_ANON_KEY')
CACHE_TYPE = os.environ.get('CACHE_TYPE', 'SimpleCache')
RATELIMIT_DEFAULT = os.environ.get('RATELIMIT_DEFAULT', '1000 per day;200 per hour')

store: Optional[SupabaseStore] = None
if SUPABASE_URL and SUPABASE_KEY:
    try:
        store = SupabaseStore.from_credentials(SUPABASE_URL, SUPABASE_KEY)
    except Exception as e:
        logger.error(f"Supabase client init failed: {e}")
        store = None
else:
    logger.warning("SUPABASE_URL / key not set; API calls will fail until configured")

app = Flask(__name__)
# Trust X-Forwarded-* from the reverse proxy
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)
app = configure_cors(app)
app.json.sort_keys = False
app.json.ensure_ascii = False
app.config['RATELIMIT_ENABLED'] = os.environ.get('RATELIMIT_ENABLED', 'true').lower() != 'false'

cache = Cache(app, config={'CACHE_TYPE': CACHE_TYPE, 'CACHE_DEFAULT_TIMEOUT': 60})
compress = Compress(app)
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATELIMIT_DEFAULT],
    storage_uri="memory://"
)
limiter.init_app(app)


def get_store() -> SupabaseStore:
    if store is None:
        raise StoreError('Supabase is not configured')
    return store


def handle_store_error(f):
    """Map store and unexpected failures onto the 500 error envelope"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except StoreError as e:
            logger.error(f"Store error in {f.__name__}: {e}", exc_info=True)
            return jsonify({'success': False, 'error': str(e)}), 500
        except Exception as e:
            logger.error(f"Unexpected error in {f.__name__}: {e}", exc_info=True)
            return jsonify({'success': False, 'error': str(e)}), 500
    return decorated_function


def _cacheable(rv) -> bool:
    """Only successful responses go into the view cache"""
    if isinstance(rv, tuple):
        return False
    return getattr(rv, 'status_code', 200) == 200


def _bounded_int_arg(name: str, default: int, *, minimum: int = 0, maximum: int = MAX_PAGE_SIZE) -> int:
    value = request.args.get(name, default, type=int)
    return max(minimum, min(value, maximum))


def _as_list(value: Any) -> Optional[List[Any]]:
    if value is None:
        return None
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# =====================
# Articles
# =====================

@app.route('/api/articles')
@handle_store_error
def get_articles():
    """List articles, newest first, optionally filtered by category"""
    category = request.args.get('category', None)
    limit = _bounded_int_arg('limit', 20, minimum=1)
    offset = _bounded_int_arg('offset', 0, maximum=MAX_OFFSET)

    articles = get_store().list_articles(category=category, limit=limit, offset=offset)
    return jsonify({'success': True, 'data': articles})


@app.route('/api/articles/trending')
@handle_store_error
def get_trending_articles():
    limit = _bounded_int_arg('limit', 10, minimum=1)
    articles = get_store().list_trending_articles(limit=limit)
    return jsonify({'success': True, 'data': articles})


@app.route('/api/articles/<article_id>')
@handle_store_error
def get_article(article_id):
    """Article detail with reactions and comments; counts as one view"""
    s = get_store()
    article = s.get_article(article_id)
    if article is None:
        return jsonify({'success': False, 'error': 'Article not found'}), 404

    reactions = s.list_reactions(article_id)
    comments = s.list_comments(article_id)

    views = s.increment_article_counter(article_id, 'view_count')
    article['view_count'] = views if views is not None else (article.get('view_count') or 0) + 1

    return jsonify({
        'success': True,
        'data': {
            **article,
            'reactions': reactions,
            'comments': comments
        }
    })


# =====================
# Comments
# =====================

@app.route('/api/comments', methods=['POST'])
@handle_store_error
def post_comment():
    data = request.get_json(silent=True) or {}
    article_id = data.get('article_id')
    text = data.get('text')
    if not article_id or not text:
        return jsonify({'success': False, 'error': 'article_id and text are required'}), 400

    s = get_store()
    comment = s.insert_comment({
        'article_id': article_id,
        'user_name': data.get('user_name') or ANONYMOUS_USER_NAME,
        'user_avatar': data.get('user_avatar') or DEFAULT_AVATAR,
        'text': text
    })
    s.increment_article_counter(article_id, 'comment_count')

    return jsonify({'success': True, 'data': comment})


# =====================
# Tags
# =====================

@app.route('/api/tags/trending')
@cache.cached(timeout=60, query_string=True, response_filter=_cacheable)
@handle_store_error
def get_trending_tags():
    limit = _bounded_int_arg('limit', 10, minimum=1)
    tags = get_store().list_trending_tags(limit=limit)
    return jsonify({'success': True, 'data': tags})


# =====================
# Recommendations
# =====================

@app.route('/api/recommendations/articles', methods=['POST'])
@handle_store_error
def recommend_articles():
    """Latest articles in the caller's categories, minus the ones already viewed"""
    data = request.get_json(silent=True) or {}
    user_id = data.get('user_id')
    categories = _as_list(data.get('categories'))
    viewed = {str(v) for v in (_as_list(data.get('viewed_articles')) or [])}

    s = get_store()
    if categories is None and user_id:
        prefs = s.get_user_preferences(str(user_id))
        if prefs:
            categories = prefs.get('favorite_categories') or None

    articles = s.list_articles_in_categories(categories, limit=10)
    filtered = [a for a in articles if str(a.get('id')) not in viewed]
    return jsonify({'success': True, 'data': filtered})


@app.route('/api/recommendations/products', methods=['POST'])
@handle_store_error
def recommend_products():
    data = request.get_json(silent=True) or {}
    categories = _as_list(data.get('categories'))
    products = get_store().list_products(categories, limit=5)
    return jsonify({'success': True, 'data': products})


# =====================
# User preferences
# =====================

@app.route('/api/user-preferences/<user_id>')
@handle_store_error
def get_user_preferences(user_id):
    prefs = get_store().get_user_preferences(user_id)
    return jsonify({'success': True, 'data': prefs})


@app.route('/api/user-preferences', methods=['POST'])
@handle_store_error
def upsert_user_preferences():
    """Create or merge a user's preferences; omitted fields keep their stored value"""
    data = request.get_json(silent=True) or {}
    user_id = data.get('user_id')
    if not user_id:
        return jsonify({'success': False, 'error': 'user_id is required'}), 400
    user_id = str(user_id)

    s = get_store()
    existing: Dict[str, Any] = s.get_user_preferences(user_id) or {}

    favorite_categories = _as_list(data.get('favorite_categories'))
    viewed_articles = _as_list(data.get('viewed_articles'))
    record = {
        'user_id': user_id,
        'favorite_categories': favorite_categories if favorite_categories is not None else existing.get('favorite_categories') or [],
        'viewed_articles': viewed_articles if viewed_articles is not None else existing.get('viewed_articles') or [],
        'last_visit': _now_iso()
    }
    result = s.upsert_user_preferences(record)
    return jsonify({'success': True, 'data': result})


# =====================
# Stats / health
# =====================

@app.route('/api/stats/categories')
@cache.cached(timeout=60, response_filter=_cacheable)
@handle_store_error
def get_category_stats():
    categories = get_store().list_article_categories()
    stats = Counter(c or 'uncategorized' for c in categories)
    return jsonify({'success': True, 'data': dict(stats)})


@app.route('/health')
@app.route('/api/health')
@limiter.exempt
def health_check():
    """API health check endpoint"""
    return jsonify({
        'status': 'ok',
        'timestamp': _now_iso()
    })


@app.errorhandler(404)
def not_found(error):
    """Custom 404 handler"""
    return jsonify({'success': False, 'error': 'Endpoint not found'}), 404


@app.errorhandler(429)
def rate_limit_handler(error):
    """Custom rate limit handler"""
    return jsonify({
        'success': False,
        'error': 'Rate limit exceeded',
        'retry_after': 60
    }), 429


@app.errorhandler(500)
def internal_error(error):
    """Custom 500 handler"""
    logger.error(f"Internal server error: {error}")
    return jsonify({'success': False, 'error': 'Internal server error'}), 500


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 3001))
    debug = os.environ.get('FLASK_ENV') == 'development'

    logger.info(f"🚀 Starting trendfeed API on port {port}")
    logger.info(f"🔧 Debug mode: {debug}")

    app.run(
        host='0.0.0.0',
        port=port,
        debug=debug,
        threaded=True
    )
