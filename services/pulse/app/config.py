"""
Configuraciones específicas para el servicio Pulse.
Umbrales y listas curadas ajustadas empíricamente; se pueden modificar
para cambiar el alcance de la recolección y del filtrado.
"""

# --- Feed de Reddit (RSS/Atom) ---
REDDIT_BASE_URL = "https://www.reddit.com"
FEED_REQUEST_TIMEOUT_SECONDS = 8.0
FEED_MAX_RETRIES = 2
FEED_RETRY_BACKOFF_SECONDS = 1.0  # Backoff lineal: intento × 1s

# --- Hilos de comentarios (JSON) ---
THREAD_REQUEST_TIMEOUT_SECONDS = 10.0
REMOVED_COMMENT_MARKERS = ('[deleted]', '[removed]')
COMMENT_POSTS_PER_SUBREDDIT = 2  # Solo se leen comentarios de los primeros posts de cada subreddit

# --- Recolección ---
FETCH_CONCURRENCY = 3  # Subreddits/hilos consultados en paralelo por tanda
FETCH_PHASE_TIMEOUT_SECONDS = 45.0
DEFAULT_MAX_POSTS = 20
DEFAULT_MAX_COMMENTS_PER_POST = 10

# Subreddits por defecto según el tema de la keyword
DEFAULT_SUBREDDITS = {
    'climate change': ['environment', 'climatechange'],
    'politics': ['politics', 'worldnews'],
    'technology': ['technology', 'artificial'],
    'health': ['health', 'medicine'],
    'economy': ['economics', 'finance'],
    'education': ['education', 'college'],
    'default': ['news', 'worldnews'],
}

# --- Filtro de relevancia ---
BROAD_MIN_TEXT_LENGTH = 20
BROAD_KEYWORD_MATCH_BONUS = 10
MAX_FILTERED_POSTS = 5
MAX_FILTERED_COMMENTS = 10

FOCUSED_DOMAIN_TERM_POINTS = 1
FOCUSED_TRENDING_KEYWORD_POINTS = 2
FOCUSED_TRENDING_TOPIC_BONUS = 5
FOCUSED_LITERAL_KEYWORD_BONUS = 3
FOCUSED_MIN_CATEGORY_MATCHES = 2
PRIORITY_SUBREDDIT_SORT_BONUS = 100

# Términos del dominio social/ONG (1 punto cada uno)
DOMAIN_TERMS = [
    'community', 'policy', 'funding', 'nonprofit', 'ngo', 'charity', 'volunteer',
    'advocacy', 'government', 'public', 'welfare', 'rights', 'access', 'support',
    'crisis', 'reform', 'program', 'initiative', 'campaign', 'donation',
    'vulnerable', 'local', 'global', 'impact', 'sustainable',
]

# Temas en tendencia para ONGs: la frase del tema vale el bonus completo,
# cada keyword asociada vale 2 puntos
TRENDING_TOPICS = {
    'climate action': ['climate change', 'sustainability', 'renewable energy', 'solar power', 'emissions'],
    'social equity': ['inequality', 'social justice', 'human rights'],
    'mental health': ['mental health', 'depression', 'anxiety', 'suicide prevention'],
    'digital divide': ['digital access', 'internet inequality', 'tech education'],
    'food security': ['hunger', 'food insecurity', 'nutrition', 'food banks'],
    'refugee crisis': ['refugees', 'displacement', 'immigration', 'asylum'],
    'youth empowerment': ['youth development', 'mentorship', 'leadership'],
    'elderly care': ['aging', 'elderly care', 'senior citizens', 'healthcare'],
    'homelessness': ['homelessness', 'housing crisis', 'affordable housing'],
    'education inequality': ['education gap', 'literacy', 'school funding', 'educational access'],
    'community resilience': ['disaster preparedness', 'community building', 'local development'],
    'sustainable development': ['sustainable development', 'sdgs', 'global goals'],
}

# Subreddits prioritarios para la audiencia especializada
PRIORITY_SUBREDDITS = [
    'nonprofit', 'socialwork', 'publicpolicy', 'humanrights',
    'environment', 'climatechange', 'sustainability', 'globalhealth',
]

# --- Enriquecimiento con IA ---
AI_BATCH_SIZE = 3
AI_INTER_BATCH_DELAY_SECONDS = 1.5
AI_ITEM_TIMEOUT_SECONDS = 8.0
AI_OVERALL_TIMEOUT_SECONDS = 45.0
AI_RATE_LIMIT_MAX_RETRIES = 2
AI_RATE_LIMIT_BACKOFF_SECONDS = 5.0  # Backoff lineal: intento × 5s

# --- Persistencia y estadísticas ---
TRENDING_VOLUME_THRESHOLD = 10
TOP_SUBREDDITS_LIMIT = 10
RECENT_DATA_WINDOW_HOURS = 24
MAX_QUERY_LIMIT = 100

# --- Scheduler ---
SCHEDULED_KEYWORDS_PER_RUN = 5
SCHEDULED_MAX_POSTS = 10
SCHEDULED_MAX_COMMENTS_PER_POST = 5
SCHEDULED_KEYWORD_DELAY_SECONDS = 3.0
DEFAULT_FETCH_INTERVAL_HOURS = 24
MIN_FETCH_INTERVAL_HOURS = 1
MAX_FETCH_INTERVAL_HOURS = 168
