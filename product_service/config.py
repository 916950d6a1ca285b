"""
Product service configuration: which roles each mutating operation requires.
Tokens are verified with the shared secret from shop_common.
"""
from shop_common.roles import ADMIN, MANAGER

# create / update
WRITE_ROLES = (ADMIN, MANAGER)
# delete
DELETE_ROLES = (ADMIN,)

NAME_MAX_LEN = 100
DESCRIPTION_MAX_LEN = 500
CATEGORY_MAX_LEN = 50
