"""Schema v1 - Accounts: profiles, stores and user roles.

Profiles are keyed by the Supabase auth user id. The application creates the
profile row itself with upsert semantics, so there is no trigger on
auth.users.
"""

schema = {
    'version': 1,
    'tables': [
        {
            'name': 'profiles',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True},
                {'name': 'user_type', 'type': 'TEXT', 'nullable': False, 'default': "'buyer'",
                 'check': "user_type IN ('buyer', 'seller', 'both')"},
                {'name': 'display_name', 'type': 'TEXT'},
                {'name': 'email', 'type': 'TEXT'},
                {'name': 'avatar_url', 'type': 'TEXT'},
                {'name': 'bio', 'type': 'TEXT'},
                {'name': 'created_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'},
                {'name': 'updated_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'}
            ],
            'foreign_keys': [
                {'columns': ['id'], 'references': 'auth.users(id)', 'on_delete': 'CASCADE'}
            ]
        },
        {
            'name': 'stores',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'owner_id', 'type': 'UUID', 'nullable': False},
                {'name': 'name', 'type': 'TEXT', 'nullable': False},
                {'name': 'description', 'type': 'TEXT'},
                {'name': 'stellar_wallet_address', 'type': 'TEXT', 'nullable': False,
                 'check': "stellar_wallet_address ~ '^G[A-Z0-9]{55}$'"},
                {'name': 'logo_url', 'type': 'TEXT'},
                {'name': 'created_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'},
                {'name': 'updated_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'}
            ],
            'foreign_keys': [
                {'columns': ['owner_id'], 'references': 'profiles(id)', 'on_delete': 'CASCADE'}
            ],
            'indexes': [
                {'name': 'idx_stores_owner', 'columns': ['owner_id']}
            ]
        },
        {
            'name': 'user_roles',
            'columns': [
                {'name': 'id', 'type': 'UUID', 'primary_key': True, 'default': 'gen_random_uuid()'},
                {'name': 'user_id', 'type': 'UUID', 'nullable': False},
                {'name': 'role', 'type': 'TEXT', 'nullable': False,
                 'check': "role IN ('admin', 'seller', 'user')"},
                {'name': 'created_at', 'type': 'TIMESTAMPTZ', 'nullable': False, 'default': 'now()'}
            ],
            'foreign_keys': [
                {'columns': ['user_id'], 'references': 'auth.users(id)', 'on_delete': 'CASCADE'}
            ],
            'indexes': [
                {'name': 'idx_user_roles_user_role', 'columns': ['user_id', 'role'], 'unique': True}
            ]
        }
    ]
}
