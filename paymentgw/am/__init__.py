"""Asynchronous messaging: messages, middleware, subscriber options, events and replies."""