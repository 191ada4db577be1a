USERS = "users"
HOTELS = "hotels"
MEMBERS = "members"
PARTNERS = "partners"
CLIENTS = "clients"
TRANSACTIONS = "transactions"
PERIOD_HISTORY = "period_history"
