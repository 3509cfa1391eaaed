# Speech collaborators
