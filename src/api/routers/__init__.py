# Route modules: `health` for operational checks, `hotels` for service filters and change notifications.
