"""Namespace for dependency injection; it holds no modules."""