"""Namespace for database-backed stores; it holds no modules."""