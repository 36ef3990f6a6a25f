"""Domain modelling: entities, aggregates, events, commands, replies and dispatch."""