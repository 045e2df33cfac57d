PLUGIN_MANIFEST = {
    "name": "generateblocks",
    "display_name": "GenerateBlocks",
    "version": "1",
    "module": "plugins.generateblocks.plugin:GenerateBlocksProvider",
    # - options: global styles, defaults, settings and the CSS version marker
    # - files: generated CSS under uploads/generateblocks/
    "capabilities": ["options", "files"],
    "abilities": [
        "generateblocks/get-global-styles",
        "generateblocks/update-global-styles",
        "generateblocks/clear-cache",
    ],
}
