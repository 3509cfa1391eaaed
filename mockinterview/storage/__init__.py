# Storage collaborators
