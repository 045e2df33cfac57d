PLUGIN_MANIFEST = {
    "name": "generatepress",
    "display_name": "GeneratePress",
    "version": "1",
    # Dotted import path used by the ability loader to instantiate the provider.
    "module": "plugins.generatepress.plugin:GeneratePressProvider",
    # Capability whitelist:
    # - options: wp_options reads/writes (allow-listed names only)
    # - posts: page meta and gp_elements CRUD
    # - theme: active theme identity, Premium status, dynamic CSS rebuild
    "capabilities": ["options", "posts", "theme"],
    "abilities": [
        "generatepress/get-info",
        "generatepress/clear-cache",
        "generatepress/list-options",
        "generatepress/get-options",
        "generatepress/update-options",
        "generatepress/get-settings",
        "generatepress/update-settings",
        "generatepress/get-page-meta",
        "generatepress/update-page-meta",
        "generatepress/list-elements",
        "generatepress/get-element",
        "generatepress/create-element",
        "generatepress/update-element",
        "generatepress/delete-element",
    ],
}
