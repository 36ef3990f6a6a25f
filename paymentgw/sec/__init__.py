"""Namespace for saga coordination; it holds no modules."""