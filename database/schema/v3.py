"""Schema v3 - User data purge function and updated_at triggers.

delete_user_data is called over RPC by the admin facade before the auth
user is deleted.
"""

schema = {
    'version': 3,
    'functions': [
        {
            'name': 'delete_user_data',
            'sql': '''
                CREATE OR REPLACE FUNCTION delete_user_data(user_id_param UUID)
                RETURNS VOID
                LANGUAGE plpgsql
                SECURITY DEFINER
                SET search_path = public
                AS $$
                BEGIN
                    DELETE FROM product_images
                    WHERE product_id IN (SELECT id FROM products WHERE seller_id = user_id_param);
                    DELETE FROM products WHERE seller_id = user_id_param;
                    DELETE FROM stores WHERE owner_id = user_id_param;
                    DELETE FROM user_roles WHERE user_id = user_id_param;
                    DELETE FROM profiles WHERE id = user_id_param;
                END;
                $$
            '''
        }
    ],
    'triggers': [
        {
            'name': 'profiles_set_updated_at',
            'table': 'profiles',
            'timing': 'BEFORE',
            'event': 'UPDATE',
            'function_name': 'set_updated_at',
            'function_body': '''
                BEGIN
                    NEW.updated_at = now();
                    RETURN NEW;
                END;
            '''
        },
        {
            'name': 'stores_set_updated_at',
            'table': 'stores',
            'timing': 'BEFORE',
            'event': 'UPDATE',
            'function_name': 'set_updated_at',
            'function_body': '''
                BEGIN
                    NEW.updated_at = now();
                    RETURN NEW;
                END;
            '''
        },
        {
            'name': 'products_set_updated_at',
            'table': 'products',
            'timing': 'BEFORE',
            'event': 'UPDATE',
            'function_name': 'set_updated_at',
            'function_body': '''
                BEGIN
                    NEW.updated_at = now();
                    RETURN NEW;
                END;
            '''
        }
    ],
    'migrations': [
        'REVOKE EXECUTE ON FUNCTION delete_user_data(UUID) FROM PUBLIC, anon, authenticated'
    ]
}
