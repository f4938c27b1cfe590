# Shared models
