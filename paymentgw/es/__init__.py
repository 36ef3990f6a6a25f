"""Event sourcing: versioned aggregates, stores and repositories."""