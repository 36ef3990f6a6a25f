"""Namespace for transactional messaging; it holds no modules."""