"""Sample catalog used to populate a fresh marketplace."""

from decimal import Decimal

CATEGORIES = [
    {'name': 'Electronics', 'slug': 'electronics', 'description': 'Electronic devices and accessories'},
    {'name': 'Clothing', 'slug': 'clothing', 'description': 'Apparel and fashion items'},
    {'name': 'Books', 'slug': 'books', 'description': 'Physical and digital books'},
    {'name': 'Art', 'slug': 'art', 'description': 'Artwork and creative pieces'},
    {'name': 'Home & Garden', 'slug': 'home-garden', 'description': 'Home improvement and gardening items'},
    {'name': 'Sports', 'slug': 'sports', 'description': 'Sports equipment and accessories'}
]

# Subcategories reference their parent by slug
SUBCATEGORIES = [
    {'name': 'Audio', 'slug': 'audio', 'description': 'Headphones, speakers and audio gear', 'parent': 'electronics'},
    {'name': 'Smart Home', 'slug': 'smart-home', 'description': 'Connected devices for the home', 'parent': 'electronics'},
    {'name': 'T-Shirts', 'slug': 't-shirts', 'description': 'Casual and printed tees', 'parent': 'clothing'},
    {'name': 'Programming', 'slug': 'programming', 'description': 'Software development books', 'parent': 'books'},
    {'name': 'Paintings', 'slug': 'paintings', 'description': 'Original paintings and prints', 'parent': 'art'},
    {'name': 'Racket Sports', 'slug': 'racket-sports', 'description': 'Tennis, badminton and squash', 'parent': 'sports'}
]

# Products reference their category by slug
PRODUCTS = [
    {
        'title': 'Wireless Bluetooth Headphones',
        'description': 'High-quality wireless headphones with noise cancellation',
        'price': Decimal('99.99'),
        'category': 'audio',
        'stock': 50,
        'slug': 'wireless-bluetooth-headphones-001',
        'featured': True,
        'rating': Decimal('4.5'),
        'rating_count': 128
    },
    {
        'title': 'Organic Cotton T-Shirt',
        'description': 'Comfortable organic cotton t-shirt in various colors',
        'price': Decimal('24.99'),
        'category': 't-shirts',
        'stock': 100,
        'slug': 'organic-cotton-tshirt-002',
        'featured': False,
        'rating': Decimal('4.2'),
        'rating_count': 45
    },
    {
        'title': 'Python Programming Guide',
        'description': 'Complete guide to modern Python programming',
        'price': Decimal('39.99'),
        'category': 'programming',
        'stock': 25,
        'slug': 'python-programming-guide-003',
        'featured': True,
        'rating': Decimal('4.8'),
        'rating_count': 89
    },
    {
        'title': 'Abstract Canvas Art',
        'description': 'Beautiful abstract painting on canvas',
        'price': Decimal('149.99'),
        'category': 'paintings',
        'stock': 5,
        'slug': 'abstract-canvas-art-004',
        'featured': False,
        'rating': Decimal('4.7'),
        'rating_count': 12
    },
    {
        'title': 'Smart Home Thermostat',
        'description': 'WiFi-enabled programmable thermostat',
        'price': Decimal('199.99'),
        'category': 'smart-home',
        'stock': 30,
        'slug': 'smart-home-thermostat-005',
        'featured': True,
        'rating': Decimal('4.6'),
        'rating_count': 67
    },
    {
        'title': 'Professional Tennis Racket',
        'description': 'High-performance tennis racket for serious players',
        'price': Decimal('89.99'),
        'category': 'racket-sports',
        'stock': 15,
        'slug': 'professional-tennis-racket-006',
        'featured': False,
        'rating': Decimal('4.4'),
        'rating_count': 34
    },
    {
        'title': 'Portable Bluetooth Speaker',
        'description': 'Waterproof speaker with twelve hours of playback',
        'price': Decimal('59.99'),
        'category': 'audio',
        'stock': 40,
        'slug': 'portable-bluetooth-speaker-007',
        'featured': False,
        'rating': Decimal('4.3'),
        'rating_count': 76
    },
    {
        'title': 'Stellar Logo Hoodie',
        'description': 'Fleece hoodie with an embroidered rocket',
        'price': Decimal('54.00'),
        'category': 'clothing',
        'stock': 60,
        'slug': 'stellar-logo-hoodie-008',
        'featured': True,
        'rating': Decimal('4.9'),
        'rating_count': 21
    },
    {
        'title': 'Raised Garden Bed Kit',
        'description': 'Cedar raised bed, tool-free assembly',
        'price': Decimal('129.50'),
        'category': 'home-garden',
        'stock': 12,
        'slug': 'raised-garden-bed-kit-009',
        'featured': False,
        'rating': Decimal('4.1'),
        'rating_count': 18
    },
    {
        'title': 'Yoga Mat Pro',
        'description': 'Non-slip six millimetre mat with carry strap',
        'price': Decimal('34.99'),
        'category': 'sports',
        'stock': 80,
        'slug': 'yoga-mat-pro-010',
        'featured': False,
        'rating': Decimal('4.0'),
        'rating_count': 53
    }
]

IMAGE_COLORS = ['4F46E5', '7C3AED', 'DB2777', '059669']
IMAGE_VIEWS = ['Main Image', 'Alternative View', 'Detail View', 'In Use']
