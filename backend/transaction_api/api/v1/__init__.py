# transaction_api.api.v1 package - exports the router modules so
# "from transaction_api.api.v1 import health, transactions" works.
from . import health
from . import transactions
