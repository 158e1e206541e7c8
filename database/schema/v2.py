"""Schema v2 - Catalog: categories, products and product images."""

schema = {
    'version': 2,
    'tables': [
        {
            'name': 'categories',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'name', 'type': 'TEXT', 'nullable': False},
                {'name': 'slug', 'type': 'TEXT', 'nullable': False, 'unique': True},
                {'name': 'description', 'type': 'TEXT'},
                {'name': 'parent_id', 'type': 'UUID'},
                {'name': 'created_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'}
            ],
            'foreign_keys': [
                {'columns': ['parent_id'], 'references': 'categories(id)', 'on_delete': 'SET NULL'}
            ]
        },
        {
            'name': 'products',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'title', 'type': 'TEXT', 'nullable': False},
                {'name': 'description', 'type': 'TEXT'},
                {'name': 'price', 'type': 'NUMERIC(12, 2)', 'nullable': False, 'check': 'price >= 0'},
                {'name': 'category', 'type': 'UUID'},
                {'name': 'seller_id', 'type': 'UUID'},
                {'name': 'stock', 'type': 'INT4', 'nullable': False, 'default': '0', 'check': 'stock >= 0'},
                {'name': 'slug', 'type': 'TEXT', 'nullable': False, 'unique': True},
                {'name': 'featured', 'type': 'BOOLEAN', 'nullable': False, 'default': 'false'},
                {'name': 'rating', 'type': 'NUMERIC(3, 2)', 'nullable': False, 'default': '0'},
                {'name': 'rating_count', 'type': 'INT4', 'nullable': False, 'default': '0'},
                {'name': 'created_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'},
                {'name': 'updated_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'}
            ],
            'foreign_keys': [
                {'columns': ['category'], 'references': 'categories(id)', 'on_delete': 'SET NULL'},
                {'columns': ['seller_id'], 'references': 'profiles(id)', 'on_delete': 'SET NULL'}
            ],
            'indexes': [
                {'name': 'idx_products_category', 'columns': ['category']},
                {'name': 'idx_products_featured', 'columns': ['featured'], 'where': 'featured'}
            ]
        },
        {
            'name': 'product_images',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'product_id', 'type': 'UUID', 'nullable': False},
                {'name': 'url', 'type': 'TEXT', 'nullable': False},
                {'name': 'alt_text', 'type': 'TEXT'},
                {'name': 'display_order', 'type': 'INT4', 'nullable': False, 'default': '0'},
                {'name': 'is_primary', 'type': 'BOOLEAN', 'nullable': False, 'default': 'false'},
                {'name': 'created_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'}
            ],
            'foreign_keys': [
                {'columns': ['product_id'], 'references': 'products(id)', 'on_delete': 'CASCADE'}
            ],
            'indexes': [
                {'name': 'idx_product_images_product', 'columns': ['product_id', 'display_order']}
            ]
        }
    ]
}
